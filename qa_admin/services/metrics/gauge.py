"""Values for the dashboard's dial gauges.

The sentiment dial spans 0-100 and reserves a fixed segment per label:
Negative [0, 40), Neutral [40, 60), Positive [60, 100]. The label's
probability positions the needle inside its segment. Manual scores use a
0-5 dial, so they are shown as-is.
"""

from __future__ import annotations

from qa_admin.models.review import SentimentLabel

_SEGMENTS: dict[SentimentLabel, tuple[float, float]] = {
    SentimentLabel.negative: (0.0, 40.0),
    SentimentLabel.neutral: (40.0, 20.0),
    SentimentLabel.positive: (60.0, 40.0),
}


def sentiment_gauge_value(label: SentimentLabel | str, score: float) -> float:
    label = label if isinstance(label, SentimentLabel) else SentimentLabel(label)
    base, width = _SEGMENTS[label]
    return base + float(score) * width


def score_gauge_value(score: float | None) -> float | None:
    if score is None:
        return None
    return float(score)


def score_gauge_band(score: float | None) -> str | None:
    if score is None:
        return None
    if score < 3.0:
        return "low"
    if score < 4.0:
        return "medium"
    return "high"
