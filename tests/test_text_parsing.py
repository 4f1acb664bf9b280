from __future__ import annotations

from ptt_pipelines.grammar import LineKind, classify_line
from ptt_pipelines.models import PASTED_TEXT_SOURCE, UNKNOWN, UNTITLED, ReactionType
from ptt_pipelines.text_parser import (
    extract_body,
    extract_comments,
    extract_comments_fallback,
    extract_meta,
    parse_text,
)

FIXTURE = "\n".join(
    [
        "標題: Example",
        "作者: abc123",
        "時間: Wed Jan 1",
        "hello",
        "※ 發信站: 批踢踢實業坊(ptt.cc), 來自: 1.2.3.4 (臺灣)",
        "※ 文章網址: https://www.ptt.cc/bbs/Stock/M.1763685004.A.D8F.html",
        "推 user1: good 01/01 10:00",
        "噓 user2: bad",
        "→ user3: meh 01/01 10:05",
    ]
)


def test_parse_text_fixture_extracts_meta_comments_and_stats():
    post = parse_text(FIXTURE, PASTED_TEXT_SOURCE)

    assert post.title == "Example"
    assert post.author == "abc123"
    assert post.date == "Wed Jan 1"
    assert post.body == "hello"
    assert post.source == PASTED_TEXT_SOURCE

    assert [c.reaction for c in post.comments] == [
        ReactionType.PUSH,
        ReactionType.BOO,
        ReactionType.ARROW,
    ]
    assert [c.user for c in post.comments] == ["user1", "user2", "user3"]
    assert [c.content for c in post.comments] == ["good", "bad", "meh"]
    assert [c.timestamp for c in post.comments] == ["01/01 10:00", "", "01/01 10:05"]
    assert [c.id for c in post.comments] == ["c-txt-0", "c-txt-1", "c-txt-2"]

    s = post.stats
    assert (s.push, s.boo, s.arrow, s.total) == (1, 1, 1, 3)


def test_parse_text_handles_ansi_terminal_paste():
    raw = (
        "\x1b[34;47m 作者 \x1b[44;37m abc123 (暱稱)  看板  Stock\r\n"
        "\x1b[34;47m 標題 \x1b[44;37m [標的] 2330 多\r\n"
        "\x1b[34;47m 時間 \x1b[44;37m Thu Nov 20 08:30:04 2025\r\n"
        "本文\r\n"
        "※ 發信站: 批踢踢實業坊(ptt.cc)\r\n"
        "\x1b[1;37m推 \x1b[33muser1\x1b[m\x1b[33m: 漲爆\x1b[m 11/20 08:33\r\n"
    )
    post = parse_text(raw, PASTED_TEXT_SOURCE)

    assert post.comments[0].user == "user1"
    assert post.comments[0].content == "漲爆"
    assert post.author == "abc123"
    assert post.title == "[標的] 2330 多"
    assert post.date == "Thu Nov 20 08:30:04 2025"
    assert post.body == "本文"
    assert post.comments[0].timestamp == "11/20 08:33"
    assert post.stats.total == 1


def test_extract_meta_defaults_when_labels_missing():
    meta = extract_meta("just some text\nwithout headers")
    assert (meta.title, meta.author, meta.date) == (UNTITLED, UNKNOWN, UNKNOWN)


def test_extract_meta_author_stops_at_whitespace():
    meta = extract_meta("作者  abc123 (Nick)  看板  Stock\n標題  [心得] 測試\n")
    assert meta.author == "abc123"
    assert meta.title == "[心得] 測試"


def test_extract_body_strips_rule_and_quote_markers():
    text = (
        "時間: Mon\n"
        "> line one\n"
        "> line two\n"
        + "─" * 39
        + "\n※ 發信站: ptt"
    )
    assert extract_body(text) == "line one\nline two"


def test_extract_body_without_header_stops_at_footer():
    assert extract_body("just body\n※ 發信站: ptt\n推 a: b") == "just body"


def test_extract_body_inverted_span_falls_back_to_whole_text():
    text = "※ 發信站 first\n時間: T\n"
    assert extract_body(text) == "※ 發信站 first\n時間: T"


def test_body_is_head_truncated_to_2000_chars():
    post = parse_text("時間: T\n" + "a" * 2500 + "\n※ 發信站", PASTED_TEXT_SOURCE)
    assert post.body == "a" * 2000


def test_extract_comments_drops_footer_url_lines_and_empty_content():
    text = "→ abc: 文章網址: https://www.ptt.cc/x\n推 user1: ok\n"
    comments = extract_comments(text)
    assert [c.content for c in comments] == ["ok"]


def test_extract_comments_drops_overlong_content_without_triggering_fallback():
    text = "推 user1: " + "x" * 151 + "\n噓 user2: short\n"
    post = parse_text(text, PASTED_TEXT_SOURCE)

    assert [c.user for c in post.comments] == ["user2"]
    assert post.comments[0].id == "c-txt-0"
    assert all(len(c.content) <= 150 for c in post.comments)


def test_fallback_runs_only_when_regex_scan_is_empty():
    line = "推 user1: " + "y" * 200 + " 11/20 08:33"
    assert extract_comments(line) == []

    post = parse_text(line, PASTED_TEXT_SOURCE)
    assert post.stats.total == 1
    c = post.comments[0]
    assert c.id == "c-txt-fb-0"
    assert c.content == "y" * 200
    assert c.timestamp == "11/20 08:33"


def test_extract_comments_fallback_skips_footer_lines():
    text = "推 abc: 文章網址: https://x\n  → user9 no colon here\n"
    comments = extract_comments_fallback(text)
    assert [(c.reaction, c.user, c.content) for c in comments] == [
        (ReactionType.ARROW, "user9", "no colon here"),
    ]


def test_parse_text_without_any_comments_has_zero_stats():
    post = parse_text("標題: 無回應\n時間: T\n內容而已\n", PASTED_TEXT_SOURCE)
    assert post.comments == ()
    assert post.stats.total == 0


def test_classify_line():
    assert classify_line("推 user1: hi") is LineKind.REACTION
    assert classify_line("※ 發信站: 批踢踢實業坊") is LineKind.FOOTER
    assert classify_line("作者: abc") is LineKind.HEADER
    assert classify_line("plain words") is LineKind.TEXT


def test_body_sentence_with_tag_is_not_a_comment():
    text = "\n".join(
        [
            "標題: 台積電",
            "作者: abc123",
            "時間: Mon",
            "大家都在推 TSMC 因為 AI 需求",
            "※ 發信站: 批踢踢實業坊(ptt.cc)",
            "噓 real1: 不認同",
        ]
    )
    post = parse_text(text, PASTED_TEXT_SOURCE)

    assert [(c.reaction, c.user, c.content) for c in post.comments] == [
        (ReactionType.BOO, "real1", "不認同"),
    ]
    assert "大家都在推 TSMC" in post.body


def test_reply_quoting_pushes_counts_only_its_own_comments():
    text = "\n".join(
        [
            "標題: Re: [標的] 2330 多",
            "作者: abc123",
            "時間: Mon",
            "※ 引述《orig》之銘言:",
            ": 推 quoted1: 原文的推文",
            "我的回覆",
            "※ 發信站: 批踢踢實業坊(ptt.cc)",
            "噓 real1: 不認同",
        ]
    )
    post = parse_text(text, PASTED_TEXT_SOURCE)

    assert [c.user for c in post.comments] == ["real1"]
    assert post.stats.total == 1
    assert "原文的推文" in post.body


def test_reaction_tag_must_open_the_line_without_footer():
    comments = extract_comments("本文說推 TSMC 很棒\n  推 user1: yes\n")
    assert [(c.user, c.content) for c in comments] == [("user1", "yes")]


def test_fallback_ignores_body_lines_before_footer():
    text = "時間: T\n推 TSMC 是好公司\n※ 發信站: ptt\n推 user1: " + "z" * 200
    post = parse_text(text, PASTED_TEXT_SOURCE)

    assert [(c.id, c.user) for c in post.comments] == [("c-txt-fb-0", "user1")]
    assert post.body == "推 TSMC 是好公司"
