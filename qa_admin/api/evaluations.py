from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from qa_admin.api.deps import get_db
from qa_admin.models.evaluation import KPI_CATEGORIES
from qa_admin.schemas.common import ListResponse
from qa_admin.schemas.evaluation import EvaluationCreate, EvaluationRead
from qa_admin.services.evaluations import evaluations
from qa_admin.services.response import list_response

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


@router.post("", response_model=EvaluationRead, status_code=status.HTTP_201_CREATED)
def create_evaluation(payload: EvaluationCreate, db: Session = Depends(get_db)):
    return evaluations.create(db, payload)


@router.get("", response_model=ListResponse[EvaluationRead])
def list_evaluations(
    agent_id: str | None = None,
    team_leader_id: str | None = None,
    ticket: str | None = None,
    score_range: str | None = Query(default=None, pattern="^(low|medium|high)$"),
    start_date: str | None = None,
    end_date: str | None = None,
    order_by: str = Query(default="created_at"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    items = evaluations.list(
        db,
        agent_id=agent_id,
        team_leader_id=team_leader_id,
        ticket=ticket,
        score_range=score_range,
        start_date=start_date,
        end_date=end_date,
        order_by=order_by,
        order_dir=order_dir,
        limit=limit,
        offset=offset,
    )
    return list_response(items, limit, offset)


@router.get("/kpi-categories", response_model=list[str])
def list_kpi_categories():
    return list(KPI_CATEGORIES)


@router.get("/{evaluation_id}", response_model=EvaluationRead)
def get_evaluation(evaluation_id: str, db: Session = Depends(get_db)):
    return evaluations.get(db, evaluation_id)
