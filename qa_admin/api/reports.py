from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qa_admin.api.deps import get_db
from qa_admin.schemas.metrics import MetricsReportRead, SentimentStatsRead
from qa_admin.services.metrics.reports import MetricsRequest, metrics_reports

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/metrics", response_model=MetricsReportRead)
def metrics_report(
    agent_id: str | None = None,
    team_leader_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    db: Session = Depends(get_db),
):
    report = metrics_reports.build_report(
        db,
        MetricsRequest(
            agent_id=agent_id,
            team_leader_id=team_leader_id,
            start_date=start_date,
            end_date=end_date,
        ),
    )
    return MetricsReportRead.model_validate(report)


@router.get("/sentiment", response_model=SentimentStatsRead)
def sentiment_report(db: Session = Depends(get_db)):
    return SentimentStatsRead.model_validate(metrics_reports.sentiment_stats(db))
