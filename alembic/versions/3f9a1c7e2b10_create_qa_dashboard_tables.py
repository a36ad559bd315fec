"""create_qa_dashboard_tables

Revision ID: 3f9a1c7e2b10
Revises:
Create Date: 2026-10-18 09:12:44.218310

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = '3f9a1c7e2b10'
down_revision = None
branch_labels = None
depends_on = None

user_role = postgresql.ENUM("agent", "team_leader", name="userrole", create_type=False)
review_source = postgresql.ENUM(
    "email", "contact_form", "support_ticket", "review", "social_media", "other",
    name="reviewsource",
    create_type=False,
)
# Enum names, as SQLAlchemy stores them for SentimentLabel.
sentiment_label = postgresql.ENUM("positive", "negative", "neutral", name="sentimentlabel", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    user_role.create(bind, checkfirst=True)
    review_source.create(bind, checkfirst=True)
    sentiment_label.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("team_leader_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_role_active", "users", ["role", "is_active"])
    op.create_index("ix_users_team_leader", "users", ["team_leader_id"])

    op.create_table(
        "qa_evaluations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("ticket_id", sa.String(length=120), nullable=False),
        sa.Column("agent_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("manual_score", sa.Float(), nullable=True),
        sa.Column("ai_score", sa.Float(), nullable=True),
        sa.Column("accuracy", sa.Float(), nullable=True),
        sa.Column("qa_kpi_category", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_qa_evaluations_agent_created", "qa_evaluations", ["agent_id", "created_at"])
    op.create_index("ix_qa_evaluations_ticket", "qa_evaluations", ["ticket_id"])

    op.create_table(
        "customer_reviews",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("source", review_source, nullable=False),
        sa.Column("contact_info", sa.String(length=255), nullable=True),
        sa.Column("processed", sa.Boolean(), nullable=True, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_customer_reviews_created", "customer_reviews", ["created_at"])
    op.create_index("ix_customer_reviews_processed", "customer_reviews", ["processed"])

    op.create_table(
        "sentiment_analysis",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "review_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("customer_reviews.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("sentiment_label", sentiment_label, nullable=False),
        sa.Column("sentiment_score", sa.Float(), nullable=False),
        sa.Column("negative_score", sa.Float(), nullable=False),
        sa.Column("positive_score", sa.Float(), nullable=False),
        sa.Column("neutral_score", sa.Float(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("sentiment_analysis")
    op.drop_index("ix_customer_reviews_processed", table_name="customer_reviews")
    op.drop_index("ix_customer_reviews_created", table_name="customer_reviews")
    op.drop_table("customer_reviews")
    op.drop_index("ix_qa_evaluations_ticket", table_name="qa_evaluations")
    op.drop_index("ix_qa_evaluations_agent_created", table_name="qa_evaluations")
    op.drop_table("qa_evaluations")
    op.drop_index("ix_users_team_leader", table_name="users")
    op.drop_index("ix_users_role_active", table_name="users")
    op.drop_table("users")
    sa.Enum(name="sentimentlabel").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="reviewsource").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
