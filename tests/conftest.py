import os
import sqlite3
import uuid
from datetime import UTC, datetime

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv(os.path.join(os.getcwd(), ".env"))

# Register UUID adapter for SQLite - store as string
sqlite3.register_adapter(uuid.UUID, lambda u: str(u))

# Monkey-patch SQLAlchemy's UUID type for SQLite compatibility
# This must happen before any models are imported
from sqlalchemy.sql import sqltypes  # noqa: E402

_original_uuid_bind_processor = sqltypes.Uuid.bind_processor
_original_uuid_result_processor = sqltypes.Uuid.result_processor


def _sqlite_uuid_bind_processor(self, dialect):
    if dialect.name == "sqlite":
        def process(value):
            if value is not None:
                if isinstance(value, uuid.UUID):
                    return str(value)
                return str(uuid.UUID(value)) if value else None
            return None
        return process
    return _original_uuid_bind_processor(self, dialect)


def _sqlite_uuid_result_processor(self, dialect, coltype):
    if dialect.name == "sqlite":
        def process(value):
            if value is not None:
                if isinstance(value, uuid.UUID):
                    return value
                return uuid.UUID(value) if value else None
            return None
        return process
    return _original_uuid_result_processor(self, dialect, coltype)


sqltypes.Uuid.bind_processor = _sqlite_uuid_bind_processor
sqltypes.Uuid.result_processor = _sqlite_uuid_result_processor

from qa_admin.db import Base  # noqa: E402
from qa_admin.models import CustomerReview, Evaluation, SentimentLabel, SentimentResult, User, UserRole  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    yield session
    session.close()


def _unique_email(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


@pytest.fixture()
def make_user(db_session):
    def _make(name: str, role: UserRole = UserRole.agent, team_leader: User | None = None, is_active: bool = True):
        user = User(
            name=name,
            email=_unique_email(name.lower().replace(" ", ".")),
            role=role,
            team_leader_id=team_leader.id if team_leader is not None else None,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def team_leader(make_user):
    return make_user("Maria Leader", role=UserRole.team_leader)


@pytest.fixture()
def agent(make_user, team_leader):
    return make_user("Nikos Agent", team_leader=team_leader)


@pytest.fixture()
def make_evaluation(db_session):
    def _make(agent: User, manual_score=None, ai_score=None, kpis=None, ticket_id="T-1", created_at=None):
        evaluation = Evaluation(
            ticket_id=ticket_id,
            agent_id=agent.id,
            manual_score=manual_score,
            ai_score=ai_score,
            qa_kpi_category=list(kpis or []),
            created_at=created_at or datetime.now(UTC),
        )
        db_session.add(evaluation)
        db_session.commit()
        db_session.refresh(evaluation)
        return evaluation

    return _make


@pytest.fixture()
def make_review(db_session):
    def _make(content: str, label: SentimentLabel | None = None, score: float = 0.9, created_at=None):
        review = CustomerReview(
            content=content,
            processed=label is not None,
            created_at=created_at or datetime.now(UTC),
        )
        if label is not None:
            review.sentiment = SentimentResult(
                sentiment_label=label,
                sentiment_score=score,
                negative_score=score if label == SentimentLabel.negative else 0.0,
                positive_score=score if label == SentimentLabel.positive else 0.0,
                neutral_score=score if label == SentimentLabel.neutral else 0.0,
            )
        db_session.add(review)
        db_session.commit()
        db_session.refresh(review)
        return review

    return _make
