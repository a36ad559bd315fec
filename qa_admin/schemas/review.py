from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from qa_admin.models.review import ReviewSource, SentimentLabel
from qa_admin.services.metrics.gauge import sentiment_gauge_value


class CustomerReviewCreate(BaseModel):
    content: str = Field(min_length=1)
    source: ReviewSource = ReviewSource.email
    contact_info: str | None = Field(default=None, max_length=255)
    analyze: bool = False


class SentimentResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    sentiment_label: SentimentLabel
    sentiment_score: float
    negative_score: float
    positive_score: float
    neutral_score: float
    comments: str | None = None
    created_at: datetime

    @computed_field
    @property
    def gauge_value(self) -> float:
        return sentiment_gauge_value(self.sentiment_label, self.sentiment_score)


class CustomerReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    content: str
    source: ReviewSource
    contact_info: str | None = None
    processed: bool
    created_at: datetime
    sentiment: SentimentResultRead | None = None


class SentimentAnalyzeRequest(BaseModel):
    text: str = Field(min_length=1)
    review_id: UUID | None = None
    comments: str | None = None


class SentimentBatchRequest(BaseModel):
    texts: list[str] = Field(min_length=1, max_length=50)


class SentimentAnalysisRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    label: SentimentLabel
    score: float
    scores: dict[str, float]

    @computed_field
    @property
    def gauge_value(self) -> float:
        return sentiment_gauge_value(self.label, self.score)

    @classmethod
    def from_outcome(cls, outcome) -> SentimentAnalysisRead:
        return cls(label=outcome.label, score=outcome.score, scores=outcome.scores.as_dict())


class PendingAnalysisRead(BaseModel):
    analyzed: int
    items: list[CustomerReviewRead]
