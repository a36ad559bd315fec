"""Three-class sentiment output to the dashboard's label/score/scores shape.

The inference endpoint answers ``[[{"label": "LABEL_0", "score": 0.91}, ...]]``.
Class indices map onto fixed labels; the strictly greatest probability wins
and the first maximal class in response order breaks ties.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from qa_admin.errors import InferenceError
from qa_admin.models.review import SentimentLabel

LABEL_MAP: dict[str, SentimentLabel] = {
    "LABEL_0": SentimentLabel.negative,
    "LABEL_1": SentimentLabel.positive,
    "LABEL_2": SentimentLabel.neutral,
}


@dataclass(frozen=True)
class SentimentScores:
    negative: float = 0.0
    positive: float = 0.0
    neutral: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {"negative": self.negative, "positive": self.positive, "neutral": self.neutral}


@dataclass(frozen=True)
class SentimentOutcome:
    label: SentimentLabel
    score: float
    scores: SentimentScores


def _malformed(detail: str) -> InferenceError:
    return InferenceError("sentiment_malformed", f"Malformed sentiment response: {detail}")


def _class_entries(payload: Any) -> list[Any]:
    if isinstance(payload, dict) and payload.get("error"):
        raise InferenceError("sentiment_upstream_error", f"Sentiment model error: {payload['error']}")
    if not isinstance(payload, list) or not payload:
        raise _malformed("expected a non-empty list")
    entries = payload[0]
    # Some deployments drop the outer batch dimension.
    if isinstance(entries, dict):
        entries = payload
    if not isinstance(entries, list) or not entries:
        raise _malformed("expected a list of class scores")
    return entries


def normalize_sentiment_output(payload: Any) -> SentimentOutcome:
    values: dict[SentimentLabel, float] = {}
    best_label: SentimentLabel | None = None
    best_score = -math.inf

    for entry in _class_entries(payload):
        if not isinstance(entry, dict):
            raise _malformed("class entry is not an object")
        raw_label = entry.get("label")
        label = LABEL_MAP.get(raw_label) if isinstance(raw_label, str) else None
        if label is None:
            raise _malformed(f"unknown label {raw_label!r}")
        score = entry.get("score")
        if isinstance(score, bool) or not isinstance(score, int | float) or not math.isfinite(score):
            raise _malformed(f"non-numeric score for {raw_label}")
        if not 0.0 <= score <= 1.0:
            raise _malformed(f"probability {score!r} for {raw_label} is outside [0, 1]")
        score = float(score)
        values[label] = score
        if score > best_score:
            best_label, best_score = label, score

    scores = SentimentScores(
        negative=values.get(SentimentLabel.negative, 0.0),
        positive=values.get(SentimentLabel.positive, 0.0),
        neutral=values.get(SentimentLabel.neutral, 0.0),
    )
    return SentimentOutcome(label=best_label, score=best_score, scores=scores)
