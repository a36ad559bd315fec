"""Dependency injection container.

External clients are built once per process and handed to routes through
``qa_admin.api.deps``. Tests replace them with ``override``:

    with container.sentiment_client.override(fake_client):
        response = client.post("/sentiment", json={"text": "..."})
"""

from __future__ import annotations

from dependency_injector import containers, providers  # type: ignore[import-not-found]


def _build_sentiment_client():
    from qa_admin.services.sentiment.client import build_sentiment_client
    return build_sentiment_client()


def _build_identity_client():
    from qa_admin.services.identity import build_identity_client
    return build_identity_client()


class Container(containers.DeclarativeContainer):
    # External collaborators
    sentiment_client = providers.Singleton(_build_sentiment_client)
    identity_client = providers.Singleton(_build_identity_client)


# Global container instance
container = Container()