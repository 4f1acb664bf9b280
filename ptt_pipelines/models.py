from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNTITLED = "無標題"
UNKNOWN = "未知"
PASTED_TEXT_SOURCE = "Text Import / Gmail"

BODY_MAX_CHARS = 2000


class ReactionType(Enum):
    """Comment polarity tag as printed on the board."""

    PUSH = "推"
    BOO = "噓"
    ARROW = "→"


@dataclass(frozen=True)
class Comment:
    """One reaction line under a post."""

    id: str
    reaction: ReactionType
    user: str
    content: str
    timestamp: str = ""

    def render_line(self) -> str:
        return f"{self.reaction.value} {self.user}: {self.content}"


@dataclass(frozen=True)
class CommentStats:
    push: int = 0
    boo: int = 0
    arrow: int = 0
    total: int = 0


@dataclass(frozen=True)
class Post:
    """
    Extraction result for a single board post.

    Built only through stats.finalize_post(); stats are derived from comments
    and checked here so a Post can never carry drifting counts.
    """

    title: str
    author: str
    date: str
    source: str
    body: str
    comments: tuple[Comment, ...] = field(default_factory=tuple)
    stats: CommentStats = field(default_factory=CommentStats)

    def __post_init__(self) -> None:
        s = self.stats
        if not (s.push + s.boo + s.arrow == s.total == len(self.comments)):
            raise ValueError(
                f"Inconsistent stats: push={s.push} boo={s.boo} arrow={s.arrow} "
                f"total={s.total} comments={len(self.comments)}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "date": self.date,
            "source": self.source,
            "body": self.body,
            "comments": [
                {
                    "id": c.id,
                    "reaction": c.reaction.value,
                    "user": c.user,
                    "content": c.content,
                    "timestamp": c.timestamp,
                }
                for c in self.comments
            ],
            "stats": {
                "push": self.stats.push,
                "boo": self.stats.boo,
                "arrow": self.stats.arrow,
                "total": self.stats.total,
            },
        }
