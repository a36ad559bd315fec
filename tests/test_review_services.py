import uuid
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from qa_admin.errors import InferenceError, NotFoundError, ValidationError
from qa_admin.models.review import CustomerReview, ReviewSource, SentimentLabel, SentimentResult
from qa_admin.schemas.review import CustomerReviewCreate, CustomerReviewRead
from qa_admin.services.reviews import customer_reviews
from qa_admin.services.sentiment.client import SentimentClient
from qa_admin.services.sentiment.normalizer import SentimentOutcome, SentimentScores


def _outcome(label=SentimentLabel.positive, score=0.8):
    return SentimentOutcome(label=label, score=score, scores=SentimentScores(positive=score))


def _client():
    return MagicMock(spec=SentimentClient)


def test_create_review_without_sentiment_is_unprocessed(db_session):
    review = customer_reviews.create(
        db_session,
        CustomerReviewCreate(content=" Slow reply ", source=ReviewSource.contact_form, contact_info=""),
    )
    assert review.content == "Slow reply"
    assert review.processed is False
    assert review.contact_info is None
    assert review.sentiment is None


def test_create_review_with_sentiment_stores_result(db_session):
    review = customer_reviews.create(db_session, CustomerReviewCreate(content="Great help"), sentiment=_outcome())

    assert review.processed is True
    assert review.sentiment.sentiment_label == SentimentLabel.positive
    assert CustomerReviewRead.model_validate(review).sentiment.gauge_value == pytest.approx(92.0)


def test_analyze_attaches_result(db_session, make_review):
    review = make_review("Very friendly agent")
    client = _client()
    client.analyze.return_value = _outcome(SentimentLabel.neutral, 0.5)

    analyzed = customer_reviews.analyze(db_session, str(review.id), client)

    client.analyze.assert_called_once_with("Very friendly agent")
    assert analyzed.processed is True
    assert analyzed.sentiment.sentiment_label == SentimentLabel.neutral


def test_analyze_twice_is_rejected(db_session, make_review):
    review = make_review("Done already", label=SentimentLabel.negative)
    client = _client()

    with pytest.raises(ValidationError):
        customer_reviews.analyze(db_session, str(review.id), client)
    client.analyze.assert_not_called()


def test_analyze_failure_stores_nothing(db_session, make_review):
    review = make_review("Unlucky")
    client = _client()
    client.analyze.side_effect = InferenceError("sentiment_http_error", "down")

    with pytest.raises(InferenceError):
        customer_reviews.analyze(db_session, str(review.id), client)

    db_session.expire_all()
    assert db_session.get(CustomerReview, review.id).processed is False
    assert db_session.query(SentimentResult).count() == 0


def test_analyze_unknown_review(db_session):
    with pytest.raises(NotFoundError):
        customer_reviews.analyze(db_session, str(uuid.uuid4()), _client())


def test_analyze_pending_processes_batch(db_session, make_review):
    make_review("first", created_at=datetime(2024, 1, 1, tzinfo=UTC))
    make_review("second", created_at=datetime(2024, 1, 2, tzinfo=UTC))
    make_review("done", label=SentimentLabel.positive)
    client = _client()
    client.analyze_many_sync.return_value = [_outcome(), _outcome(SentimentLabel.negative, 0.7)]

    analyzed = customer_reviews.analyze_pending(db_session, client)

    client.analyze_many_sync.assert_called_once_with(["first", "second"])
    assert [review.sentiment.sentiment_label for review in analyzed] == [
        SentimentLabel.positive,
        SentimentLabel.negative,
    ]
    assert db_session.query(CustomerReview).filter(CustomerReview.processed.is_(False)).count() == 0


def test_analyze_pending_is_all_or_nothing(db_session, make_review):
    make_review("first")
    make_review("second")
    client = _client()
    client.analyze_many_sync.side_effect = InferenceError("sentiment_timeout", "timed out")

    with pytest.raises(InferenceError):
        customer_reviews.analyze_pending(db_session, client)

    assert db_session.query(SentimentResult).count() == 0


def test_analyze_pending_with_nothing_to_do(db_session):
    client = _client()
    assert customer_reviews.analyze_pending(db_session, client) == []
    client.analyze_many_sync.assert_not_called()


def test_list_filters(db_session, make_review):
    make_review("Angry about billing", label=SentimentLabel.negative, created_at=datetime(2024, 1, 1, tzinfo=UTC))
    make_review("Happy with billing", label=SentimentLabel.positive, created_at=datetime(2024, 1, 2, tzinfo=UTC))
    make_review("Pending billing note", created_at=datetime(2024, 1, 3, tzinfo=UTC))

    assert [r.content for r in customer_reviews.list(db_session, search="BILLING")] == [
        "Pending billing note",
        "Happy with billing",
        "Angry about billing",
    ]
    assert [r.content for r in customer_reviews.list(db_session, sentiment="Negative")] == ["Angry about billing"]
    assert len(customer_reviews.list(db_session, processed=True)) == 2
    assert len(customer_reviews.list(db_session, source="email")) == 3
    assert customer_reviews.list(db_session, start_date="2024-01-03") == customer_reviews.list(
        db_session, processed=False
    )


def test_list_rejects_unknown_source(db_session):
    with pytest.raises(ValidationError):
        customer_reviews.list(db_session, source="carrier-pigeon")
