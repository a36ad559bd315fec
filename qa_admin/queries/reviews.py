"""Query builder for customer reviews."""

from __future__ import annotations

from typing import Any, ClassVar

from sqlalchemy.orm import selectinload

from qa_admin.models.review import CustomerReview, ReviewSource, SentimentLabel, SentimentResult
from qa_admin.queries.base import BaseQuery
from qa_admin.services.common import validate_enum


class ReviewQuery(BaseQuery[CustomerReview]):
    model_class = CustomerReview
    ordering_fields: ClassVar[dict[str, Any]] = {
        "created_at": CustomerReview.created_at,
        "source": CustomerReview.source,
    }

    def search(self, term: str | None) -> ReviewQuery:
        if not term or not term.strip():
            return self
        return self._filter(CustomerReview.content.ilike(f"%{term.strip()}%"))

    def by_source(self, source: ReviewSource | str | None) -> ReviewQuery:
        if not source:
            return self
        return self._filter(CustomerReview.source == validate_enum(source, ReviewSource, "source"))

    def by_sentiment(self, label: SentimentLabel | str | None) -> ReviewQuery:
        if not label:
            return self
        label = validate_enum(label, SentimentLabel, "sentiment")
        clone = self._clone()
        clone._query = clone._query.join(CustomerReview.sentiment).filter(SentimentResult.sentiment_label == label)
        return clone

    def processed_only(self, processed: bool | None = True) -> ReviewQuery:
        if processed is None:
            return self
        return self._filter(CustomerReview.processed.is_(processed))

    def with_sentiment(self) -> ReviewQuery:
        clone = self._clone()
        clone._query = clone._query.options(selectinload(CustomerReview.sentiment))
        return clone
