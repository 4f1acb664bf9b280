from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from ptt_pipelines.models import ReactionType

# -------------------------
# Tokens
# -------------------------

TITLE_LABEL = "標題"
AUTHOR_LABEL = "作者"
DATE_LABEL = "時間"
HEADER_LABELS = (TITLE_LABEL, AUTHOR_LABEL, DATE_LABEL)

# Origin-station attribution line; right boundary of the body.
FOOTER_MARKER = "※ 發信站"
# "article URL:" line in the footer; never a comment.
ARTICLE_URL_MARKER = "文章網址:"
HORIZONTAL_RULE = "─" * 39

CONTENT_MAX_CHARS = 150

_TAGS = "|".join(re.escape(r.value) for r in ReactionType)
_USER = r"[A-Za-z0-9_]+"
_TIMESTAMP = r"[0-9]{2}/[0-9]{2}\s[0-9]{2}:[0-9]{2}"

# -------------------------
# Header lines
# -------------------------

TITLE_RE = re.compile(rf"^[ \t]*{TITLE_LABEL}[:\s]+(.+)", re.MULTILINE)
AUTHOR_RE = re.compile(rf"^[ \t]*{AUTHOR_LABEL}[:\s]+(\S+)", re.MULTILINE)
DATE_RE = re.compile(rf"^[ \t]*{DATE_LABEL}[:\s]+(.+)", re.MULTILINE)
# Date is the last header field; the body starts right after this line.
HEADER_END_RE = re.compile(rf"^[ \t]*{DATE_LABEL}[:\s]+.+\n", re.MULTILINE)

# -------------------------
# Reaction lines
# -------------------------

# Tag must open the line; colon and spacing are optional since stripped
# ANSI codes often eat them.
REACTION_RE = re.compile(
    rf"^[ \t]*({_TAGS})\s+({_USER})\s*:?\s*(.+?)\s*({_TIMESTAMP})?$",
    re.MULTILINE,
)
REACTION_LOOSE_RE = re.compile(rf"^\s*({_TAGS})\s+({_USER})\s*:?\s*(.+)")
TRAILING_TIMESTAMP_RE = re.compile(rf"({_TIMESTAMP})$")

QUOTE_PREFIX_RE = re.compile(r"^> ", re.MULTILINE)


class LineKind(Enum):
    HEADER = "header"
    REACTION = "reaction"
    FOOTER = "footer"
    TEXT = "text"


def reaction_from_tag(tag: Optional[str]) -> Optional[ReactionType]:
    """Map an on-page tag to its ReactionType; anything else is None."""
    if tag is None:
        return None
    try:
        return ReactionType(tag.strip())
    except ValueError:
        return None


def classify_line(line: str) -> LineKind:
    """
    Classify one line of normalized text.

    Precedence: footer marker, then reaction line, then header label.
    """
    if FOOTER_MARKER in line or ARTICLE_URL_MARKER in line:
        return LineKind.FOOTER
    if REACTION_LOOSE_RE.match(line):
        return LineKind.REACTION
    if any(re.match(rf"[ \t]*{label}[:\s]", line) for label in HEADER_LABELS):
        return LineKind.HEADER
    return LineKind.TEXT


def has_post_markers(text: str) -> bool:
    """True when text carries a header label or a reaction tag symbol."""
    return any(label in text for label in HEADER_LABELS) or any(
        r.value in text for r in ReactionType
    )
