from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from qa_admin.services.metrics.accuracy import from_stored_fraction


class EvaluationCreate(BaseModel):
    ticket_id: str = Field(min_length=1, max_length=120)
    agent_id: UUID
    manual_score: float | None = Field(default=None, ge=1, le=5)
    ai_score: float | None = Field(default=None, ge=1, le=5)
    qa_kpi_category: list[str] = Field(default_factory=list)
    notes: str | None = None


class EvaluationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    ticket_id: str
    agent_id: UUID
    manual_score: float | None = None
    ai_score: float | None = None
    accuracy: float | None = None
    qa_kpi_category: list[str] | None = None
    notes: str | None = None
    created_at: datetime

    @computed_field
    @property
    def accuracy_percent(self) -> float | None:
        return from_stored_fraction(self.accuracy)
