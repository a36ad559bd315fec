from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

UNKNOWN_AGENT_NAME = "Unknown Agent"


@dataclass(frozen=True)
class EvaluationProjection:
    agent_id: str
    manual_score: float | None = None
    qa_kpi_category: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class AgentScore:
    agent_id: str
    display_name: str
    average: float | None
    count: int


@dataclass(frozen=True)
class ScoreSummary:
    overall_average: float | None
    scored_count: int
    evaluation_count: int
    per_agent: list[AgentScore]


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        value = float(value)
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _mean(total: float, count: int) -> float | None:
    if count <= 0:
        return None
    return total / count


def rank_agents(rows: Iterable[AgentScore]) -> list[AgentScore]:
    """Highest average first; rows without an average go last in input order."""
    rows = list(rows)
    scored = sorted((row for row in rows if row.average is not None), key=lambda row: row.average, reverse=True)
    unscored = [row for row in rows if row.average is None]
    return scored + unscored


def aggregate_scores(evaluations: Iterable[Any], roster: Iterable[Any] = ()) -> ScoreSummary:
    """Fold evaluations into an overall mean and a ranked per-agent breakdown.

    Null manual scores are skipped rather than counted as zero. An agent
    whose evaluations carry no score at all is left out of the breakdown.
    """
    names = {str(member.id): getattr(member, "name", None) for member in roster}

    total = 0.0
    scored_count = 0
    evaluation_count = 0
    per_agent: dict[str, list[float]] = {}

    for evaluation in evaluations:
        evaluation_count += 1
        agent_key = str(_field(evaluation, "agent_id"))
        bucket = per_agent.setdefault(agent_key, [0.0, 0])
        score = _score(_field(evaluation, "manual_score"))
        if score is None:
            continue
        total += score
        scored_count += 1
        bucket[0] += score
        bucket[1] += 1

    rows = [
        AgentScore(
            agent_id=agent_key,
            display_name=names.get(agent_key) or UNKNOWN_AGENT_NAME,
            average=_mean(agent_total, int(agent_count)),
            count=int(agent_count),
        )
        for agent_key, (agent_total, agent_count) in per_agent.items()
        if agent_count > 0
    ]

    return ScoreSummary(
        overall_average=_mean(total, scored_count),
        scored_count=scored_count,
        evaluation_count=evaluation_count,
        per_agent=rank_agents(rows),
    )


def count_kpi_categories(evaluations: Iterable[Any]) -> dict[str, int]:
    """Tally KPI tags, one increment per occurrence, in first-seen order."""
    counts: dict[str, int] = {}
    for evaluation in evaluations:
        tags = _field(evaluation, "qa_kpi_category") or ()
        for tag in tags:
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def rank_kpi_categories(counts: Mapping[str, int]) -> list[tuple[str, int]]:
    # sorted() is stable, so equal counts keep first-seen order.
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)
