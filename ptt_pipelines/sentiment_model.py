from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

import numpy as np
import torch
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from ptt_pipelines.sentiment_types import SentimentLabel, SentimentResult

logger = logging.getLogger(__name__)

_NEUTRAL = SentimentResult(label="neu", score=0.0, probs={"neg": 0.0, "neu": 1.0, "pos": 0.0})


@dataclass(frozen=True)
class SentimentModelConfig:
    model_path: str
    model_version: str
    batch_size: int
    max_length: int
    neutral_floor: float
    device: str  # "auto" | "cpu" | "cuda"
    # Index order of the classifier head's logits
    label_order: tuple[SentimentLabel, ...] = ("neg", "neu", "pos")


def _select_device(device: str) -> torch.device:
    if device in ("cpu", "cuda"):
        return torch.device(device)
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


@lru_cache(maxsize=1)
def _load_model_and_tokenizer(model_path: str):
    """
    Load once per process. Cached by model_path.

    Raises:
        OSError: if model files are missing or path is invalid.
    """
    logger.info("Loading sentiment model: path=%s", model_path)
    tokenizer = AutoTokenizer.from_pretrained(model_path)
    model = AutoModelForSequenceClassification.from_pretrained(model_path)
    return model, tokenizer


class SentimentModel:
    """
    3-class sequence classifier over short comment lines.

    The model/tokenizer pair is loaded once per process; inference is batched
    and results keep the input order.
    """

    def __init__(self, cfg: SentimentModelConfig):
        if sorted(cfg.label_order) != ["neg", "neu", "pos"]:
            raise ValueError(f"label_order must be a permutation of neg/neu/pos: {cfg.label_order}")
        if cfg.batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        if cfg.max_length <= 0:
            raise ValueError("max_length must be > 0")

        self._cfg = cfg
        self._device = _select_device(cfg.device)

        model, tokenizer = _load_model_and_tokenizer(cfg.model_path)
        self._model = model.to(self._device)
        self._model.eval()
        self._tokenizer = tokenizer

        logger.info(
            "Sentiment model ready: version=%s device=%s batch=%s max_length=%s",
            cfg.model_version,
            self._device.type,
            cfg.batch_size,
            cfg.max_length,
        )

    @property
    def model_version(self) -> str:
        return self._cfg.model_version

    def predict(self, texts: Sequence[str]) -> list[SentimentResult]:
        """Blank texts come back neutral without touching the model."""
        results: list[SentimentResult] = []
        for batch in _batched(texts, self._cfg.batch_size):
            results.extend(self._predict_batch(batch))
        return results

    def _predict_batch(self, texts: Sequence[str]) -> list[SentimentResult]:
        live = [(i, t) for i, t in enumerate(texts) if t and t.strip()]
        out: list[SentimentResult] = [_NEUTRAL] * len(texts)
        if not live:
            return out

        enc = self._tokenizer(
            [t for _, t in live],
            padding=True,
            truncation=True,
            max_length=self._cfg.max_length,
            return_tensors="pt",
        )
        enc = {k: v.to(self._device) for k, v in enc.items()}

        with torch.no_grad():
            logits = self._model(**enc).logits
            probs = torch.softmax(logits, dim=-1).cpu().numpy()

        for (i, _), row in zip(live, probs):
            out[i] = self._to_result(row)
        return out

    def _to_result(self, row: np.ndarray) -> SentimentResult:
        probs = {label: float(row[idx]) for idx, label in enumerate(self._cfg.label_order)}
        neg, neu, pos = probs["neg"], probs["neu"], probs["pos"]

        if self._cfg.neutral_floor > 0.0 and max(neg, neu, pos) < self._cfg.neutral_floor:
            label: SentimentLabel = "neu"
        else:
            label = _argmax_label(neg, neu, pos)

        return SentimentResult(label=label, score=pos - neg, probs=probs)


def _argmax_label(neg: float, neu: float, pos: float) -> SentimentLabel:
    if pos >= neu and pos >= neg:
        return "pos"
    if neg >= neu and neg >= pos:
        return "neg"
    return "neu"


def _batched(items: Sequence[str], batch_size: int) -> Iterable[Sequence[str]]:
    for i in range(0, len(items), batch_size):
        yield items[i : i + batch_size]
