from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from qa_admin.api.deps import get_db, get_sentiment_client
from qa_admin.schemas.common import ListResponse
from qa_admin.schemas.review import CustomerReviewCreate, CustomerReviewRead, PendingAnalysisRead
from qa_admin.services.response import list_response
from qa_admin.services.reviews import customer_reviews

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=CustomerReviewRead, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: CustomerReviewCreate,
    db: Session = Depends(get_db),
    client=Depends(get_sentiment_client),
):
    # Inference runs before the insert so a failed call stores nothing.
    outcome = client.analyze(payload.content) if payload.analyze else None
    return customer_reviews.create(db, payload, sentiment=outcome)


@router.get("", response_model=ListResponse[CustomerReviewRead])
def list_reviews(
    search: str | None = None,
    source: str | None = None,
    sentiment: str | None = None,
    processed: bool | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    items = customer_reviews.list(
        db,
        search=search,
        source=source,
        sentiment=sentiment,
        processed=processed,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return list_response(items, limit, offset)


@router.post("/analyze-pending", response_model=PendingAnalysisRead)
def analyze_pending_reviews(
    limit: int = Query(default=20, ge=1, le=50),
    db: Session = Depends(get_db),
    client=Depends(get_sentiment_client),
):
    items = customer_reviews.analyze_pending(db, client, limit=limit)
    return {"analyzed": len(items), "items": items}


@router.get("/{review_id}", response_model=CustomerReviewRead)
def get_review(review_id: str, db: Session = Depends(get_db)):
    return customer_reviews.get(db, review_id)


@router.post("/{review_id}/analyze", response_model=CustomerReviewRead)
def analyze_review(review_id: str, db: Session = Depends(get_db), client=Depends(get_sentiment_client)):
    return customer_reviews.analyze(db, review_id, client)
