"""Query builder for QA evaluations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from qa_admin.models.evaluation import Evaluation
from qa_admin.queries.base import BaseQuery
from qa_admin.services.common import coerce_uuid, validate_enum
from qa_admin.services.metrics.buckets import ScoreRange, score_range_bounds

if TYPE_CHECKING:
    from uuid import UUID


class EvaluationQuery(BaseQuery[Evaluation]):
    """Query builder for Evaluation model.

    Usage:
        rows = (
            EvaluationQuery(db)
            .by_agent_ids(resolution.agent_ids)
            .created_between(date_range.start_at, date_range.end_at)
            .metrics_projection()
            .all()
        )
    """

    model_class = Evaluation
    ordering_fields: ClassVar[dict[str, Any]] = {
        "created_at": Evaluation.created_at,
        "manual_score": Evaluation.manual_score,
        "ai_score": Evaluation.ai_score,
        "accuracy": Evaluation.accuracy,
        "ticket_id": Evaluation.ticket_id,
    }

    def by_agent_ids(self, agent_ids: list[UUID | str]) -> EvaluationQuery:
        # An empty list matches nothing; callers short-circuit before querying.
        return self._filter(Evaluation.agent_id.in_([coerce_uuid(agent_id) for agent_id in agent_ids]))

    def by_ticket(self, term: str | None) -> EvaluationQuery:
        """Case-insensitive substring match on the ticket id."""
        if not term or not term.strip():
            return self
        return self._filter(Evaluation.ticket_id.ilike(f"%{term.strip()}%"))

    def by_score_range(self, score_range: ScoreRange | str | None) -> EvaluationQuery:
        if not score_range:
            return self
        bounds = score_range_bounds(validate_enum(score_range, ScoreRange, "score_range"))
        upper = (
            Evaluation.manual_score <= bounds.upper
            if bounds.upper_inclusive
            else Evaluation.manual_score < bounds.upper
        )
        return self._filter(Evaluation.manual_score >= bounds.lower, upper)

    def metrics_projection(self) -> EvaluationQuery:
        """Restrict the selected columns to what the metrics report reads."""
        clone = self._clone()
        clone._query = clone._query.with_entities(
            Evaluation.agent_id,
            Evaluation.manual_score,
            Evaluation.qa_kpi_category,
        )
        return clone
