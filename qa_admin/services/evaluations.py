from __future__ import annotations

import builtins
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qa_admin.errors import StoreError, ValidationError
from qa_admin.models.evaluation import Evaluation
from qa_admin.models.user import User, UserRole
from qa_admin.queries.evaluations import EvaluationQuery
from qa_admin.schemas.evaluation import EvaluationCreate
from qa_admin.services import observability
from qa_admin.services.common import coerce_uuid, get_or_404
from qa_admin.services.metrics.accuracy import accuracy_percent, to_stored_fraction
from qa_admin.services.metrics.dates import resolve_date_range
from qa_admin.services.metrics.hierarchy import resolve_subject
from qa_admin.services.response import ListResponseMixin
from qa_admin.services.users import Users

logger = logging.getLogger(__name__)


class Evaluations(ListResponseMixin):
    @staticmethod
    def create(db: Session, payload: EvaluationCreate) -> Evaluation:
        agent = db.get(User, coerce_uuid(payload.agent_id))
        if agent is None or agent.role != UserRole.agent:
            raise ValidationError(
                "invalid_agent",
                "Selected agent does not exist",
                field_errors={"agent_id": ["Select a valid agent"]},
            )
        notes = (payload.notes or "").strip() or None
        evaluation = Evaluation(
            ticket_id=payload.ticket_id.strip(),
            agent_id=agent.id,
            manual_score=payload.manual_score,
            ai_score=payload.ai_score,
            accuracy=to_stored_fraction(accuracy_percent(payload.manual_score, payload.ai_score)),
            qa_kpi_category=list(payload.qa_kpi_category),
            notes=notes,
        )
        db.add(evaluation)
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to save evaluation for ticket %s: %s", payload.ticket_id, exc)
            raise StoreError("evaluation_save_failed", f"Failed to save evaluation: {exc}") from exc
        db.refresh(evaluation)
        observability.EVALUATIONS_CREATED.inc()
        return evaluation

    @staticmethod
    def get(db: Session, evaluation_id: str) -> Evaluation:
        return get_or_404(db, Evaluation, evaluation_id, detail="Evaluation not found")

    @staticmethod
    def list(
        db: Session,
        agent_id: str | None = None,
        team_leader_id: str | None = None,
        ticket: str | None = None,
        score_range: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        order_by: str | None = "created_at",
        order_dir: str | None = "desc",
        limit: int = 50,
        offset: int = 0,
    ) -> builtins.list[Evaluation]:
        query = EvaluationQuery(db)
        if agent_id or team_leader_id:
            roster = Users.roster(db)
            resolution = resolve_subject(roster, agent_id=agent_id, team_leader_id=team_leader_id)
            if resolution.is_empty:
                return []
            query = query.by_agent_ids(resolution.agent_ids)
        date_range = resolve_date_range(start_date, end_date)
        query = (
            query.by_ticket(ticket)
            .by_score_range(score_range)
            .created_between(date_range.start_at, date_range.end_at)
            .order_by(order_by, order_dir, nulls_last=True)
            .paginate(limit, offset)
        )
        try:
            return query.all()
        except SQLAlchemyError as exc:
            logger.error("Evaluation query failed: %s", exc)
            raise StoreError("evaluation_query_failed", f"Failed to load evaluations: {exc}") from exc


evaluations = Evaluations()
