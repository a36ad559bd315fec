"""Metrics report pipeline.

request -> hierarchy resolution -> date range -> evaluation query ->
score aggregation + KPI frequency -> gauge values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qa_admin.errors import StoreError, ValidationError
from qa_admin.models.review import CustomerReview, SentimentLabel, SentimentResult
from qa_admin.models.user import User
from qa_admin.queries.evaluations import EvaluationQuery
from qa_admin.queries.reviews import ReviewQuery
from qa_admin.services.metrics.aggregation import (
    AgentScore,
    aggregate_scores,
    count_kpi_categories,
    rank_kpi_categories,
)
from qa_admin.services.metrics.dates import resolve_date_range
from qa_admin.services.metrics.gauge import score_gauge_band, score_gauge_value, sentiment_gauge_value
from qa_admin.services.metrics.hierarchy import SubjectKind, SubjectResolution, find_member, resolve_subject
from qa_admin.services.users import Users

logger = logging.getLogger(__name__)

RECENT_REVIEWS_LIMIT = 5


@dataclass(frozen=True)
class MetricsRequest:
    agent_id: str | None = None
    team_leader_id: str | None = None
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True)
class MetricsReport:
    subject_kind: SubjectKind
    subject_id: str
    target_name: str
    start_at: datetime | None = None
    end_at: datetime | None = None
    evaluation_count: int = 0
    scored_count: int = 0
    average_score: float | None = None
    gauge_value: float | None = None
    gauge_band: str | None = None
    per_agent: list[AgentScore] = field(default_factory=list)
    kpi_frequency: list[tuple[str, int]] = field(default_factory=list)


@dataclass(frozen=True)
class RecentSentiment:
    review: CustomerReview
    gauge_value: float | None


@dataclass(frozen=True)
class SentimentStats:
    total: int
    counts: dict[str, int]
    percentages: dict[str, float]
    average_score: float
    recent: list[RecentSentiment]


def _target_name(resolution: SubjectResolution, roster: list[User]) -> str:
    member = find_member(roster, resolution.subject_id)
    if resolution.kind == SubjectKind.agent:
        return member.name if member is not None else f"Agent ID: {resolution.subject_id}"
    return f"Team: {member.name}" if member is not None else f"TL ID: {resolution.subject_id}"


class MetricsReportsService:
    @staticmethod
    def build_report(db: Session, request: MetricsRequest) -> MetricsReport:
        if not request.agent_id and not request.team_leader_id:
            raise ValidationError(
                "subject_required",
                "Select an agent or a team leader",
                field_errors={"agent_id": ["Agent or team leader is required"]},
            )
        roster = Users.roster(db)
        resolution = resolve_subject(
            roster,
            agent_id=request.agent_id,
            team_leader_id=request.team_leader_id,
        )
        date_range = resolve_date_range(request.start_date, request.end_date)
        report_fields = {
            "subject_kind": resolution.kind,
            "subject_id": resolution.subject_id,
            "target_name": _target_name(resolution, roster),
            "start_at": date_range.start_at,
            "end_at": date_range.end_at,
        }
        if resolution.is_empty:
            logger.info("Team leader %s has no agents; skipping evaluation query", resolution.subject_id)
            return MetricsReport(**report_fields)

        try:
            rows = (
                EvaluationQuery(db)
                .by_agent_ids(resolution.agent_ids)
                .created_between(date_range.start_at, date_range.end_at)
                .metrics_projection()
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error("Metrics query failed: %s", exc)
            raise StoreError("metrics_query_failed", f"Failed to load evaluations: {exc}") from exc

        summary = aggregate_scores(rows, roster)
        return MetricsReport(
            **report_fields,
            evaluation_count=summary.evaluation_count,
            scored_count=summary.scored_count,
            average_score=summary.overall_average,
            gauge_value=score_gauge_value(summary.overall_average),
            gauge_band=score_gauge_band(summary.overall_average),
            per_agent=summary.per_agent if resolution.kind == SubjectKind.team_leader else [],
            kpi_frequency=rank_kpi_categories(count_kpi_categories(rows)),
        )

    @staticmethod
    def sentiment_stats(db: Session) -> SentimentStats:
        grouped = (
            db.query(
                SentimentResult.sentiment_label,
                func.count(SentimentResult.id),
                func.avg(SentimentResult.sentiment_score),
            )
            .group_by(SentimentResult.sentiment_label)
            .all()
        )
        counts = {label.value: 0 for label in SentimentLabel}
        score_total = 0.0
        for label, count, average in grouped:
            counts[label.value] = count
            score_total += float(average or 0.0) * count
        total = sum(counts.values())
        percentages = {key: (count / total * 100 if total else 0.0) for key, count in counts.items()}

        recent_reviews = (
            ReviewQuery(db)
            .processed_only()
            .with_sentiment()
            .order_by("created_at", "desc")
            .paginate(limit=RECENT_REVIEWS_LIMIT)
            .all()
        )
        recent = [
            RecentSentiment(
                review=review,
                gauge_value=(
                    sentiment_gauge_value(review.sentiment.sentiment_label, review.sentiment.sentiment_score)
                    if review.sentiment is not None
                    else None
                ),
            )
            for review in recent_reviews
        ]
        return SentimentStats(
            total=total,
            counts=counts,
            percentages=percentages,
            average_score=score_total / total if total else 0.0,
            recent=recent,
        )


metrics_reports = MetricsReportsService()
