from __future__ import annotations

import math
from typing import Any

MAX_SCORE = 5.0


def _finite(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def accuracy_percent(manual: Any, ai: Any) -> float | None:
    """Percentage agreement between a manual and an AI score.

    ``100 - |manual - ai| / 5 * 100``; None unless both scores are finite.
    """
    manual_value = _finite(manual)
    ai_value = _finite(ai)
    if manual_value is None or ai_value is None:
        return None
    return 100.0 - abs(manual_value - ai_value) / MAX_SCORE * 100.0


def to_stored_fraction(percent: float | None) -> float | None:
    if percent is None:
        return None
    return percent / 100


def from_stored_fraction(fraction: float | None) -> float | None:
    if fraction is None:
        return None
    return fraction * 100
