import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qa_admin.db import Base


class ReviewSource(enum.Enum):
    email = "email"
    contact_form = "contact_form"
    support_ticket = "support_ticket"
    review = "review"
    social_media = "social_media"
    other = "other"


class SentimentLabel(enum.Enum):
    positive = "Positive"
    negative = "Negative"
    neutral = "Neutral"


class CustomerReview(Base):
    __tablename__ = "customer_reviews"
    __table_args__ = (
        Index("ix_customer_reviews_created", "created_at"),
        Index("ix_customer_reviews_processed", "processed"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[ReviewSource] = mapped_column(Enum(ReviewSource), nullable=False, default=ReviewSource.email)
    contact_info: Mapped[str | None] = mapped_column(String(255))
    processed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    sentiment = relationship("SentimentResult", back_populates="review", uselist=False)


class SentimentResult(Base):
    __tablename__ = "sentiment_analysis"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    review_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customer_reviews.id"), nullable=False, unique=True
    )
    sentiment_label: Mapped[SentimentLabel] = mapped_column(Enum(SentimentLabel), nullable=False)
    sentiment_score: Mapped[float] = mapped_column(Float, nullable=False)
    negative_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    positive_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    neutral_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    comments: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    review = relationship("CustomerReview", back_populates="sentiment")
