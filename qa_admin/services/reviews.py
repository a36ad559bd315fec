from __future__ import annotations

import builtins
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from qa_admin.errors import StoreError, ValidationError
from qa_admin.models.review import CustomerReview, SentimentResult
from qa_admin.queries.reviews import ReviewQuery
from qa_admin.schemas.review import CustomerReviewCreate
from qa_admin.services.common import get_or_404
from qa_admin.services.metrics.dates import resolve_date_range
from qa_admin.services.response import ListResponseMixin
from qa_admin.services.sentiment.client import SentimentClient
from qa_admin.services.sentiment.normalizer import SentimentOutcome

logger = logging.getLogger(__name__)


def _result_row(outcome: SentimentOutcome, comments: str | None = None) -> SentimentResult:
    return SentimentResult(
        sentiment_label=outcome.label,
        sentiment_score=outcome.score,
        negative_score=outcome.scores.negative,
        positive_score=outcome.scores.positive,
        neutral_score=outcome.scores.neutral,
        comments=(comments or "").strip() or None,
    )


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to %s: %s", action, exc)
        raise StoreError("review_save_failed", f"Failed to {action}: {exc}") from exc


class CustomerReviews(ListResponseMixin):
    @staticmethod
    def create(
        db: Session,
        payload: CustomerReviewCreate,
        sentiment: SentimentOutcome | None = None,
    ) -> CustomerReview:
        review = CustomerReview(
            content=payload.content.strip(),
            source=payload.source,
            contact_info=(payload.contact_info or "").strip() or None,
            processed=sentiment is not None,
        )
        if sentiment is not None:
            review.sentiment = _result_row(sentiment)
        db.add(review)
        _commit(db, "save review")
        db.refresh(review)
        return review

    @staticmethod
    def get(db: Session, review_id: str) -> CustomerReview:
        return get_or_404(
            db,
            CustomerReview,
            review_id,
            detail="Review not found",
            options=[selectinload(CustomerReview.sentiment)],
        )

    @staticmethod
    def attach_result(
        db: Session,
        review_id: str,
        outcome: SentimentOutcome,
        comments: str | None = None,
    ) -> CustomerReview:
        review = CustomerReviews.get(db, review_id)
        if review.sentiment is not None:
            raise ValidationError("already_analyzed", "Review already has a sentiment result")
        review.sentiment = _result_row(outcome, comments)
        review.processed = True
        _commit(db, "save sentiment result")
        db.refresh(review)
        return review

    @staticmethod
    def analyze(db: Session, review_id: str, client: SentimentClient) -> CustomerReview:
        review = CustomerReviews.get(db, review_id)
        if review.sentiment is not None:
            raise ValidationError("already_analyzed", "Review already has a sentiment result")
        outcome = client.analyze(review.content)
        return CustomerReviews.attach_result(db, review_id, outcome)

    @staticmethod
    def analyze_pending(db: Session, client: SentimentClient, limit: int = 20) -> builtins.list[CustomerReview]:
        """Analyze unprocessed reviews as one batch; nothing is stored if any call fails."""
        pending = (
            ReviewQuery(db)
            .processed_only(False)
            .with_sentiment()
            .order_by("created_at", "asc")
            .paginate(limit=limit)
            .all()
        )
        pending = [review for review in pending if review.sentiment is None]
        if not pending:
            return []
        outcomes = client.analyze_many_sync([review.content for review in pending])
        for review, outcome in zip(pending, outcomes, strict=True):
            review.sentiment = _result_row(outcome)
            review.processed = True
        _commit(db, "save sentiment results")
        for review in pending:
            db.refresh(review)
        logger.info("Analyzed %d pending reviews", len(pending))
        return pending

    @staticmethod
    def list(
        db: Session,
        search: str | None = None,
        source: str | None = None,
        sentiment: str | None = None,
        processed: bool | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> builtins.list[CustomerReview]:
        date_range = resolve_date_range(start_date, end_date)
        return (
            ReviewQuery(db)
            .search(search)
            .by_source(source)
            .by_sentiment(sentiment)
            .processed_only(processed)
            .created_between(date_range.start_at, date_range.end_at)
            .with_sentiment()
            .order_by("created_at", "desc")
            .paginate(limit, offset)
            .all()
        )


customer_reviews = CustomerReviews()
