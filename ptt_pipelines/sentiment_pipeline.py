from __future__ import annotations

import logging
from typing import Iterable, Protocol, Sequence

from ptt_pipelines.models import Comment, Post
from ptt_pipelines.sentiment_types import AnalysisInput, MarketSentiment, PostAnalysis, SentimentResult

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_BUDGET = 30000
DEFAULT_BODY_EXCERPT_CHARS = 500
KEY_POINT_COUNT = 3


class SentimentPredictor(Protocol):
    def predict(self, texts: Sequence[str]) -> list[SentimentResult]: ...


def render_comment_lines(comments: Iterable[Comment], budget: int = DEFAULT_COMMENT_BUDGET) -> str:
    """
    Render comments as "<reaction> <user>: <content>" lines.

    The joined text is cut at `budget` characters, possibly mid-line.
    """
    text = "\n".join(c.render_line() for c in comments)
    return text[:budget]


def build_analysis_input(
        post: Post,
        comment_budget: int = DEFAULT_COMMENT_BUDGET,
        body_excerpt_chars: int = DEFAULT_BODY_EXCERPT_CHARS,
) -> AnalysisInput:
    return AnalysisInput(
        title=post.title,
        body_excerpt=post.body[:body_excerpt_chars],
        comments_text=render_comment_lines(post.comments, comment_budget),
    )


def classify_mean_score(mean_score: float, threshold: float) -> MarketSentiment:
    if mean_score > threshold:
        return "bullish"
    if mean_score < -threshold:
        return "bearish"
    return "neutral"


def analyze_post(
        post: Post,
        model: SentimentPredictor,
        comment_budget: int = DEFAULT_COMMENT_BUDGET,
        threshold: float = 0.15,
) -> PostAnalysis:
    """
    Score every rendered comment line and summarize the thread.

    - sentiment: mean(pos - neg) compared against +/- threshold
    - summary: label counts and the mean score
    - key_points: the lines with the strongest scores, strongest first
    - a post without comments is judged on its body excerpt alone
    """
    analysis_input = build_analysis_input(post, comment_budget)
    lines = analysis_input.comment_lines or [analysis_input.body_excerpt]

    results = model.predict(lines)
    if len(results) != len(lines):
        raise RuntimeError("Sentiment results size mismatch")

    mean_score = sum(r.score for r in results) / len(results) if results else 0.0
    sentiment = classify_mean_score(mean_score, threshold)

    counts = {"pos": 0, "neu": 0, "neg": 0}
    for r in results:
        counts[r.label] += 1

    ranked = sorted(zip(lines, results), key=lambda pair: abs(pair[1].score), reverse=True)
    key_points = tuple(line for line, _ in ranked[:KEY_POINT_COUNT] if line.strip())

    summary = (
        f"{post.title}: {len(results)} lines scored, "
        f"{counts['pos']} positive / {counts['neg']} negative / {counts['neu']} neutral "
        f"(mean score {mean_score:+.2f}); reactions push={post.stats.push} "
        f"boo={post.stats.boo} arrow={post.stats.arrow}."
    )

    logger.info("Analyzed post: title=%s sentiment=%s mean=%.3f", post.title, sentiment, mean_score)
    return PostAnalysis(sentiment=sentiment, summary=summary, key_points=key_points)
