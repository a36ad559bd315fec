"""Query builders for database operations.

Usage:
    from qa_admin.queries import EvaluationQuery

    results = (
        EvaluationQuery(db)
        .by_agent_ids(agent_ids)
        .by_score_range("high")
        .order_by("manual_score", "desc", nulls_last=True)
        .paginate(limit=50, offset=0)
        .all()
    )
"""

from qa_admin.queries.base import BaseQuery
from qa_admin.queries.evaluations import EvaluationQuery
from qa_admin.queries.reviews import ReviewQuery

__all__ = [
    "BaseQuery",
    "EvaluationQuery",
    "ReviewQuery",
]
