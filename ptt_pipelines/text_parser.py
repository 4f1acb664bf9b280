from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ptt_pipelines.grammar import (
    ARTICLE_URL_MARKER,
    AUTHOR_RE,
    CONTENT_MAX_CHARS,
    DATE_RE,
    FOOTER_MARKER,
    HEADER_END_RE,
    HORIZONTAL_RULE,
    QUOTE_PREFIX_RE,
    REACTION_LOOSE_RE,
    REACTION_RE,
    TITLE_RE,
    TRAILING_TIMESTAMP_RE,
    LineKind,
    classify_line,
    reaction_from_tag,
)
from ptt_pipelines.models import UNKNOWN, UNTITLED, Comment, Post
from ptt_pipelines.normalize import normalize
from ptt_pipelines.stats import finalize_post

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostMeta:
    title: str = UNTITLED
    author: str = UNKNOWN
    date: str = UNKNOWN


def parse_text(text: str, source: str) -> Post:
    """
    Plaintext pipeline: normalize -> meta -> body -> comments.

    The line scan only runs when the regex scan found nothing at all; the two
    result sets are never merged.
    """
    clean = normalize(text)

    meta = extract_meta(clean)
    body = extract_body(clean)

    comments = extract_comments(clean)
    if not comments:
        comments = extract_comments_fallback(clean)
        if comments:
            logger.info("Regex scan found no comments; line scan recovered %s", len(comments))

    logger.debug(
        "Parsed text: title=%s author=%s comments=%s body_chars=%s",
        meta.title,
        meta.author,
        len(comments),
        len(body),
    )
    return finalize_post(
        title=meta.title,
        author=meta.author,
        date=meta.date,
        source=source,
        body=body,
        comments=comments,
    )


def extract_meta(text: str) -> PostMeta:
    return PostMeta(
        title=_first_group(TITLE_RE, text) or UNTITLED,
        author=_first_group(AUTHOR_RE, text) or UNKNOWN,
        date=_first_group(DATE_RE, text) or UNKNOWN,
    )


def extract_body(text: str) -> str:
    """
    Body = text between the date header line and the origin-station footer.

    Without a header the whole text is body, still cut at the footer. An
    inverted or empty span falls back to the whole text.
    """
    header_end = HEADER_END_RE.search(text)
    footer_at = text.find(FOOTER_MARKER)

    body = text
    if header_end:
        start = header_end.end()
        end = footer_at if footer_at >= 0 else len(text)
        if end > start:
            body = text[start:end].strip()
    elif footer_at >= 0:
        body = text[:footer_at].strip()

    body = QUOTE_PREFIX_RE.sub("", body.replace(HORIZONTAL_RULE, "")).strip()
    if not body:
        return text.strip()
    return body


def comment_region(text: str) -> str:
    """
    Part of the text that may hold reaction lines.

    Pushes follow the origin-station footer, so when the footer is present
    everything before it (header, body, quoted replies) is excluded.
    """
    footer_at = text.find(FOOTER_MARKER)
    return text[footer_at:] if footer_at >= 0 else text


def extract_comments(text: str) -> list[Comment]:
    comments: list[Comment] = []

    for m in REACTION_RE.finditer(comment_region(text)):
        reaction = reaction_from_tag(m.group(1))
        content = m.group(3).strip()

        if reaction is None:
            continue
        # Over-long content means the match ran across several lines.
        if len(content) > CONTENT_MAX_CHARS:
            continue
        if ARTICLE_URL_MARKER in content:
            continue
        if not content:
            continue

        comments.append(
            Comment(
                id=f"c-txt-{len(comments)}",
                reaction=reaction,
                user=m.group(2),
                content=content,
                timestamp=m.group(4) or "",
            )
        )

    return comments


def extract_comments_fallback(text: str) -> list[Comment]:
    """
    Looser per-line scan for badly degraded pastes.

    No length cap and no anchored timestamp; a trailing MM/DD HH:MM token is
    peeled off the content when present.
    """
    comments: list[Comment] = []

    for line in comment_region(text).split("\n"):
        if classify_line(line) is not LineKind.REACTION:
            continue
        m = REACTION_LOOSE_RE.match(line)
        reaction = reaction_from_tag(m.group(1)) if m else None
        if m is None or reaction is None:
            continue

        content = m.group(3).strip()
        timestamp = ""
        ts = TRAILING_TIMESTAMP_RE.search(content)
        if ts:
            timestamp = ts.group(1)
            content = content[: ts.start()].strip()

        comments.append(
            Comment(
                id=f"c-txt-fb-{len(comments)}",
                reaction=reaction,
                user=m.group(2),
                content=content,
                timestamp=timestamp,
            )
        )

    return comments


def _first_group(pattern: re.Pattern[str], text: str) -> str:
    m = pattern.search(text)
    return m.group(1).strip() if m else ""
