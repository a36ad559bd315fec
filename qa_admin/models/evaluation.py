import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qa_admin.db import Base

KPI_CATEGORIES = (
    "Communication",
    "Customer Guideness",
    "Empathy & Tone",
    "Customer Satisfaction",
    "Problem Identification",
    "Resolution Effectiveness",
    "Review Link",
    "Technical Accuracy",
)


class Evaluation(Base):
    __tablename__ = "qa_evaluations"
    __table_args__ = (
        Index("ix_qa_evaluations_agent_created", "agent_id", "created_at"),
        Index("ix_qa_evaluations_ticket", "ticket_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ticket_id: Mapped[str] = mapped_column(String(120), nullable=False)
    agent_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    manual_score: Mapped[float | None] = mapped_column(Float)
    ai_score: Mapped[float | None] = mapped_column(Float)
    # Stored as a fraction in [0, 1]; the API speaks percentages.
    accuracy: Mapped[float | None] = mapped_column(Float)
    qa_kpi_category: Mapped[list | None] = mapped_column(JSON, default=list)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    agent = relationship("User", back_populates="evaluations")
