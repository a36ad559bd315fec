from fastapi import Depends

from qa_admin.db import get_db  # noqa: F401
from qa_admin.services.auth import get_current_user_or_none, require_user_auth  # noqa: F401


def get_current_user(user=Depends(require_user_auth)):
    """The authenticated, active dashboard user."""
    return user


# -------------------------------------------------------------------------
# Container-based Dependencies
# -------------------------------------------------------------------------
# Routes receive external clients from the DI container, so tests can
# override the container providers instead of patching modules.


def get_sentiment_client():
    from qa_admin.container import container
    return container.sentiment_client()


def get_identity_client():
    from qa_admin.container import container
    return container.identity_client()
