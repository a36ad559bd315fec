"""Prometheus metrics for QA dashboard services."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

SENTIMENT_REQUESTS = Counter(
    "qa_sentiment_requests_total",
    "Total sentiment inference calls",
    ["status"],  # status: success, http_error, transport_error, malformed
)

SENTIMENT_LATENCY = Histogram(
    "qa_sentiment_request_seconds",
    "Latency of sentiment inference calls",
)

SENTIMENT_BATCHES = Counter(
    "qa_sentiment_batches_total",
    "Total sentiment batch requests",
    ["status"],  # status: success, failed
)

EVALUATIONS_CREATED = Counter(
    "qa_evaluations_created_total",
    "Total QA evaluations recorded",
)

HIERARCHY_MISMATCHES = Counter(
    "qa_hierarchy_mismatches_total",
    "Agent/team-leader filter combinations that did not match",
)

USER_ACCOUNT_EVENTS = Counter(
    "qa_user_account_events_total",
    "User account lifecycle events",
    ["event"],  # event: created, updated, activated, deactivated, cleanup_failed
)
