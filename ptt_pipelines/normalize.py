from __future__ import annotations

import re

_LINE_ENDING_RE = re.compile(r"\r\n?")

# ESC[1;33m as well as the bare "[1;33m" left behind when a mail client or
# browser drops the escape byte during copy-paste.
_ANSI_RE = re.compile(r"(?:\x1b\[|\[)(?:\d+(?:;\d+)*)?m")


def normalize(raw: str) -> str:
    """
    Canonicalize line endings to "\\n" and strip terminal color codes.

    Stripping runs to a fixed point: removing one sequence can splice its
    neighbours into a new one (e.g. "[[1mm"), which must go too so that
    normalize(normalize(x)) == normalize(x).
    """
    if not raw:
        return ""

    text = _LINE_ENDING_RE.sub("\n", raw)
    while True:
        stripped = _ANSI_RE.sub("", text).replace("\x1b", "")
        if stripped == text:
            return text
        text = stripped
