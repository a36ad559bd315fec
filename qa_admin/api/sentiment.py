from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qa_admin.api.deps import get_db, get_sentiment_client
from qa_admin.schemas.review import SentimentAnalysisRead, SentimentAnalyzeRequest, SentimentBatchRequest
from qa_admin.services.reviews import customer_reviews

router = APIRouter(prefix="/sentiment", tags=["sentiment"])


@router.post("", response_model=SentimentAnalysisRead)
def analyze_text(
    payload: SentimentAnalyzeRequest,
    db: Session = Depends(get_db),
    client=Depends(get_sentiment_client),
):
    outcome = client.analyze(payload.text)
    if payload.review_id is not None:
        customer_reviews.attach_result(db, str(payload.review_id), outcome, comments=payload.comments)
    return SentimentAnalysisRead.from_outcome(outcome)


@router.post("/batch", response_model=list[SentimentAnalysisRead])
def analyze_batch(payload: SentimentBatchRequest, client=Depends(get_sentiment_client)):
    outcomes = client.analyze_many_sync(payload.texts)
    return [SentimentAnalysisRead.from_outcome(outcome) for outcome in outcomes]
