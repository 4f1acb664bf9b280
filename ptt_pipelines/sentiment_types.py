from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping


SentimentLabel = Literal["neg", "neu", "pos"]
MarketSentiment = Literal["bullish", "bearish", "neutral"]


@dataclass(frozen=True)
class SentimentResult:
    """
    Per-text model output.

    - label: neg|neu|pos
    - score: pos_prob - neg_prob (range ~[-1, 1])
    - probs: mapping of neg/neu/pos to probability (sum ~ 1)
    """

    label: SentimentLabel
    score: float
    probs: Mapping[SentimentLabel, float]


@dataclass(frozen=True)
class AnalysisInput:
    """What a sentiment analyzer is given for one post."""

    title: str
    body_excerpt: str
    comments_text: str  # "<reaction> <user>: <content>" lines

    @property
    def comment_lines(self) -> list[str]:
        return [ln for ln in self.comments_text.split("\n") if ln.strip()]


@dataclass(frozen=True)
class PostAnalysis:
    sentiment: MarketSentiment
    summary: str
    key_points: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        return {
            "sentiment": self.sentiment,
            "summary": self.summary,
            "keyPoints": list(self.key_points),
        }
