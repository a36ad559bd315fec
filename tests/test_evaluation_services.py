import uuid
from datetime import UTC, datetime

import pytest

from qa_admin.errors import HierarchyMismatch, NotFoundError, ValidationError
from qa_admin.models.user import UserRole
from qa_admin.schemas.evaluation import EvaluationCreate, EvaluationRead
from qa_admin.services.evaluations import evaluations


def test_create_evaluation_stores_accuracy_as_fraction(db_session, agent):
    evaluation = evaluations.create(
        db_session,
        EvaluationCreate(
            ticket_id=" TCK-1001 ",
            agent_id=agent.id,
            manual_score=1,
            ai_score=5,
            qa_kpi_category=["Empathy & Tone", "Communication"],
            notes="   ",
        ),
    )

    assert evaluation.ticket_id == "TCK-1001"
    assert evaluation.accuracy == pytest.approx(0.2)
    assert evaluation.notes is None
    assert evaluation.qa_kpi_category == ["Empathy & Tone", "Communication"]
    assert EvaluationRead.model_validate(evaluation).accuracy_percent == pytest.approx(20.0)


def test_create_evaluation_without_ai_score_has_no_accuracy(db_session, agent):
    evaluation = evaluations.create(
        db_session,
        EvaluationCreate(ticket_id="T-2", agent_id=agent.id, manual_score=4, notes=" good call "),
    )
    assert evaluation.accuracy is None
    assert evaluation.notes == "good call"


def test_create_evaluation_requires_an_agent(db_session, team_leader):
    with pytest.raises(ValidationError) as exc_info:
        evaluations.create(db_session, EvaluationCreate(ticket_id="T-3", agent_id=team_leader.id))
    assert "agent_id" in exc_info.value.field_errors

    with pytest.raises(ValidationError):
        evaluations.create(db_session, EvaluationCreate(ticket_id="T-3", agent_id=uuid.uuid4()))


def test_scores_outside_scale_are_rejected_by_schema():
    with pytest.raises(ValueError):
        EvaluationCreate(ticket_id="T", agent_id=uuid.uuid4(), manual_score=5.5)


def test_get_missing_evaluation_raises_not_found(db_session):
    with pytest.raises(NotFoundError) as exc_info:
        evaluations.get(db_session, str(uuid.uuid4()))
    assert exc_info.value.status_code == 404


def test_list_filters_by_team(db_session, make_user, team_leader, agent, make_evaluation):
    other_leader = make_user("Other Leader", role=UserRole.team_leader)
    outsider = make_user("Outsider", team_leader=other_leader)
    make_evaluation(agent, 4, ticket_id="T-team")
    make_evaluation(outsider, 5, ticket_id="T-out")

    items = evaluations.list(db_session, team_leader_id=str(team_leader.id))

    assert [item.ticket_id for item in items] == ["T-team"]


def test_list_for_team_without_agents_is_empty(db_session, make_user, make_evaluation, agent):
    lonely_leader = make_user("Lonely Leader", role=UserRole.team_leader)
    make_evaluation(agent, 4)

    assert evaluations.list(db_session, team_leader_id=str(lonely_leader.id)) == []


def test_list_with_mismatched_hierarchy_raises(db_session, make_user, agent):
    other_leader = make_user("Other Leader", role=UserRole.team_leader)
    with pytest.raises(HierarchyMismatch):
        evaluations.list(db_session, agent_id=str(agent.id), team_leader_id=str(other_leader.id))


def test_list_ticket_search_and_score_range(db_session, agent, make_evaluation):
    make_evaluation(agent, 2.5, ticket_id="ABC-100")
    make_evaluation(agent, 3.5, ticket_id="abc-200")
    make_evaluation(agent, 4.5, ticket_id="XYZ-300")

    assert {item.ticket_id for item in evaluations.list(db_session, ticket="abc")} == {"ABC-100", "abc-200"}
    assert [item.ticket_id for item in evaluations.list(db_session, score_range="medium")] == ["abc-200"]
    assert [item.ticket_id for item in evaluations.list(db_session, score_range="high")] == ["XYZ-300"]


def test_list_rejects_unknown_score_range(db_session):
    with pytest.raises(ValidationError):
        evaluations.list(db_session, score_range="extreme")


def test_list_date_range_uses_local_day(db_session, agent, make_evaluation):
    # 2024-01-09 22:00 UTC is already 2024-01-10 locally.
    make_evaluation(agent, 4, ticket_id="in", created_at=datetime(2024, 1, 9, 22, 0, tzinfo=UTC))
    make_evaluation(agent, 4, ticket_id="before", created_at=datetime(2024, 1, 9, 20, 0, tzinfo=UTC))
    make_evaluation(agent, 4, ticket_id="after", created_at=datetime(2024, 1, 10, 21, 30, tzinfo=UTC))

    items = evaluations.list(db_session, start_date="2024-01-10", end_date="2024-01-10")

    assert [item.ticket_id for item in items] == ["in"]


def test_list_sorts_with_nulls_last_and_falls_back(db_session, agent, make_evaluation):
    make_evaluation(agent, None, ticket_id="none", created_at=datetime(2024, 1, 3, tzinfo=UTC))
    make_evaluation(agent, 2, ticket_id="low", created_at=datetime(2024, 1, 1, tzinfo=UTC))
    make_evaluation(agent, 5, ticket_id="top", created_at=datetime(2024, 1, 2, tzinfo=UTC))

    by_score = evaluations.list(db_session, order_by="manual_score", order_dir="desc")
    assert [item.ticket_id for item in by_score] == ["top", "low", "none"]

    by_score_asc = evaluations.list(db_session, order_by="manual_score", order_dir="asc")
    assert [item.ticket_id for item in by_score_asc] == ["low", "top", "none"]

    fallback = evaluations.list(db_session, order_by="password", order_dir="asc")
    assert [item.ticket_id for item in fallback] == ["none", "top", "low"]


def test_list_paginates(db_session, agent, make_evaluation):
    for index in range(5):
        make_evaluation(agent, 3, ticket_id=f"T-{index}", created_at=datetime(2024, 1, index + 1, tzinfo=UTC))

    page = evaluations.list(db_session, limit=2, offset=2)

    assert [item.ticket_id for item in page] == ["T-2", "T-1"]
