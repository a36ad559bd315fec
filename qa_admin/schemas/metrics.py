from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from qa_admin.schemas.review import CustomerReviewRead
from qa_admin.services.metrics.hierarchy import SubjectKind


class AgentScoreRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    agent_id: str
    display_name: str
    average: float | None = None
    count: int


class KpiFrequencyRead(BaseModel):
    category: str
    count: int


class MetricsReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    subject_kind: SubjectKind
    subject_id: str
    target_name: str
    start_at: datetime | None = None
    end_at: datetime | None = None
    evaluation_count: int
    scored_count: int
    average_score: float | None = None
    gauge_value: float | None = None
    gauge_band: str | None = None
    per_agent: list[AgentScoreRead]
    kpi_frequency: list[KpiFrequencyRead]

    @field_validator("kpi_frequency", mode="before")
    @classmethod
    def _pairs_to_rows(cls, value):
        return [
            {"category": item[0], "count": item[1]} if isinstance(item, tuple | list) else item
            for item in value or []
        ]


class RecentSentimentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    review: CustomerReviewRead
    gauge_value: float | None = None


class SentimentStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    total: int
    counts: dict[str, int]
    percentages: dict[str, float]
    average_score: float
    recent: list[RecentSentimentRead]
