from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ptt_pipelines.models import Comment, Post, ReactionType

logger = logging.getLogger(__name__)

BOM = "\ufeff"
CSV_HEADER = ("類型", "使用者", "內容", "時間")

_FILENAME_UNSAFE_RE = re.compile(r"[:\s/]")


def filter_comments(
        comments: Iterable[Comment],
        reaction: Optional[ReactionType] = None,
        user_query: str = "",
) -> list[Comment]:
    """
    Ordered subset of comments.

    - reaction: keep only this reaction type (None keeps all)
    - user_query: case-insensitive substring of the user id
    """
    query = user_query.lower()
    return [
        c
        for c in comments
        if (reaction is None or c.reaction is reaction) and query in c.user.lower()
    ]


def render_csv(comments: Iterable[Comment]) -> str:
    """BOM + header row + one row per comment, spreadsheet friendly."""
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(CSV_HEADER)
    # Rows are fully quoted so content is always wrapped and escaped.
    rows = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_ALL)
    for c in comments:
        rows.writerow((c.reaction.value, c.user, c.content, c.timestamp))
    return BOM + buf.getvalue()


def read_csv_rows(text: str) -> list[tuple[str, str, str, str]]:
    """
    Parse render_csv() output back into (reaction, user, content, timestamp) rows.

    Raises:
        ValueError: header row is missing or rows have the wrong width
    """
    if text.startswith(BOM):
        text = text[len(BOM) :]

    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header is None or tuple(header) != CSV_HEADER:
        raise ValueError(f"Unexpected CSV header: {header!r}")

    rows: list[tuple[str, str, str, str]] = []
    for lineno, row in enumerate(reader, start=2):
        if not row:
            continue
        if len(row) != len(CSV_HEADER):
            raise ValueError(f"Row {lineno} has {len(row)} fields, expected {len(CSV_HEADER)}")
        rows.append((row[0], row[1], row[2], row[3]))
    return rows


def export_filename(post: Post) -> str:
    stamp = _FILENAME_UNSAFE_RE.sub("_", post.date or "export")
    return f"ptt_stock_{stamp}.csv"


def write_csv(comments: Sequence[Comment], path: str | Path) -> Path:
    out = Path(path)
    out.write_text(render_csv(comments), encoding="utf-8", newline="")
    logger.info("Wrote CSV: path=%s rows=%s", out, len(comments))
    return out
