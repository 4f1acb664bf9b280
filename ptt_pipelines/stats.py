from __future__ import annotations

from typing import Iterable

from ptt_pipelines.models import BODY_MAX_CHARS, Comment, CommentStats, Post, ReactionType


def aggregate_stats(comments: Iterable[Comment]) -> CommentStats:
    counts = {r: 0 for r in ReactionType}
    total = 0
    for c in comments:
        counts[c.reaction] += 1
        total += 1
    return CommentStats(
        push=counts[ReactionType.PUSH],
        boo=counts[ReactionType.BOO],
        arrow=counts[ReactionType.ARROW],
        total=total,
    )


def finalize_post(
        title: str,
        author: str,
        date: str,
        source: str,
        body: str,
        comments: Iterable[Comment],
) -> Post:
    """
    Assemble the final Post.

    Stats are recomputed from the final comment list here and nowhere else;
    the body is head-truncated to BODY_MAX_CHARS.
    """
    frozen = tuple(comments)
    return Post(
        title=title,
        author=author,
        date=date,
        source=source,
        body=body[:BODY_MAX_CHARS],
        comments=frozen,
        stats=aggregate_stats(frozen),
    )
