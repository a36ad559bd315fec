import uuid
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from qa_admin.config import settings
from qa_admin.container import container
from qa_admin.db import get_db
from qa_admin.errors import InferenceError
from qa_admin.main import app
from qa_admin.models.review import SentimentLabel
from qa_admin.models.user import UserRole
from qa_admin.services.identity import IdentitySession
from qa_admin.services.sentiment.normalizer import SentimentOutcome, SentimentScores


def _token(user_id) -> str:
    return jwt.encode({"sub": str(user_id), "aud": "authenticated"}, settings.jwt_secret, algorithm="HS256")


@pytest.fixture()
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(team_leader):
    return {"Authorization": f"Bearer {_token(team_leader.id)}"}


@pytest.fixture()
def sentiment_client():
    fake = MagicMock()
    with container.sentiment_client.override(fake):
        yield fake


@pytest.fixture()
def identity_client():
    fake = MagicMock()
    with container.identity_client.override(fake):
        yield fake


def test_health_and_prometheus_are_public(client):
    assert client.get("/health").json() == {"status": "ok"}
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "qa_sentiment_requests_total" in response.text


def test_routes_require_authentication(client):
    assert client.get("/evaluations").status_code == 401
    assert client.get("/api/v1/users", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_inactive_user_token_is_rejected(client, make_user):
    retired = make_user("Retired", is_active=False)
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {_token(retired.id)}"})
    assert response.status_code == 401


def test_me_accepts_session_cookie(client, team_leader):
    client.cookies.set(settings.session_cookie_name, _token(team_leader.id))
    response = client.get("/auth/me")
    assert response.status_code == 200
    assert response.json()["name"] == "Maria Leader"


def test_login_sets_session_cookie(client, team_leader, identity_client):
    identity_client.sign_in.return_value = IdentitySession(
        access_token=_token(team_leader.id),
        expires_in=3600,
        user_id=str(team_leader.id),
    )

    response = client.post("/auth/login", json={"email": team_leader.email, "password": "s3cret-pass"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(team_leader.id)
    assert settings.session_cookie_name in response.cookies


def test_login_with_bad_credentials(client, identity_client):
    identity_client.sign_in.return_value = None
    response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "wrong-pass"})
    assert response.status_code == 401


def test_create_and_list_evaluations(client, auth_headers, agent):
    response = client.post(
        "/api/v1/evaluations",
        json={"ticket_id": "TCK-9", "agent_id": str(agent.id), "manual_score": 4, "ai_score": 3},
        headers=auth_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["accuracy"] == pytest.approx(0.8)
    assert body["accuracy_percent"] == pytest.approx(80.0)

    listing = client.get("/evaluations", params={"agent_id": str(agent.id)}, headers=auth_headers).json()
    assert listing["count"] == 1
    assert listing["items"][0]["ticket_id"] == "TCK-9"


def test_hierarchy_mismatch_is_a_conflict(client, auth_headers, make_user, agent):
    other_leader = make_user("Other Leader", role=UserRole.team_leader)
    response = client.get(
        "/reports/metrics",
        params={"agent_id": str(agent.id), "team_leader_id": str(other_leader.id)},
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "hierarchy_mismatch"


def test_metrics_report_route(client, auth_headers, team_leader, agent, make_evaluation):
    make_evaluation(agent, 5, kpis=["Empathy"])

    response = client.get("/reports/metrics", params={"team_leader_id": str(team_leader.id)}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["target_name"] == "Team: Maria Leader"
    assert body["per_agent"][0]["display_name"] == "Nikos Agent"
    assert body["kpi_frequency"] == [{"category": "Empathy", "count": 1}]


def test_metrics_report_requires_subject(client, auth_headers):
    response = client.get("/reports/metrics", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "subject_required"


def test_missing_evaluation_is_not_found(client, auth_headers):
    response = client.get(f"/evaluations/{uuid.uuid4()}", headers=auth_headers)
    assert response.status_code == 404


def test_kpi_category_catalogue(client, auth_headers):
    response = client.get("/api/v1/evaluations/kpi-categories", headers=auth_headers)
    assert response.status_code == 200
    categories = response.json()
    assert len(categories) == 8
    assert categories[0] == "Communication"
    assert "Empathy & Tone" in categories


def test_create_user_route(client, auth_headers, team_leader, identity_client):
    new_id = uuid.uuid4()
    identity_client.create_user.return_value = str(new_id)

    response = client.post(
        "/users",
        json={
            "name": "Fresh Agent",
            "email": "fresh.agent@example.com",
            "password": "s3cret-pass",
            "role": "agent",
            "team_leader_id": str(team_leader.id),
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["id"] == str(new_id)


def test_toggle_status_route(client, auth_headers, agent):
    response = client.post(f"/users/{agent.id}/toggle-status", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_sentiment_route_maps_gauge(client, auth_headers, sentiment_client):
    sentiment_client.analyze.return_value = SentimentOutcome(
        label=SentimentLabel.positive,
        score=0.5,
        scores=SentimentScores(positive=0.5, negative=0.3, neutral=0.2),
    )

    response = client.post("/sentiment", json={"text": "ok service"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["label"] == "Positive"
    assert response.json()["gauge_value"] == pytest.approx(80.0)


def test_sentiment_failure_is_bad_gateway(client, auth_headers, sentiment_client):
    sentiment_client.analyze_many_sync.side_effect = InferenceError("sentiment_http_error", "HTTP 503")

    response = client.post("/sentiment/batch", json={"texts": ["a", "b"]}, headers=auth_headers)

    assert response.status_code == 502
    assert response.json()["code"] == "sentiment_http_error"


def test_create_review_with_analysis(client, auth_headers, sentiment_client):
    sentiment_client.analyze.return_value = SentimentOutcome(
        label=SentimentLabel.negative,
        score=1.0,
        scores=SentimentScores(negative=1.0),
    )

    response = client.post(
        "/reviews",
        json={"content": "Never again", "source": "social_media", "analyze": True},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["processed"] is True
    assert body["sentiment"]["sentiment_label"] == "Negative"
    assert body["sentiment"]["gauge_value"] == pytest.approx(40.0)


def test_sentiment_stats_route(client, auth_headers, make_review):
    make_review("nice", label=SentimentLabel.neutral, score=0.6)
    response = client.get("/api/v1/reports/sentiment", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["counts"]["Neutral"] == 1


def test_logout_clears_cookie(client, auth_headers):
    response = client.post("/auth/logout", headers=auth_headers)
    assert response.status_code == 200
    assert 'session_token=""' in response.headers["set-cookie"]
