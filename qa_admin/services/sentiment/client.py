from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import time
from collections.abc import Sequence
from typing import Any

import httpx

from qa_admin.config import settings
from qa_admin.errors import InferenceError, ValidationError
from qa_admin.services import observability
from qa_admin.services.sentiment.normalizer import SentimentOutcome, normalize_sentiment_output

logger = logging.getLogger(__name__)


def _require_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("empty_text", "Text to analyze is required", field_errors={"text": ["Required"]})
    return cleaned


class SentimentClient:
    """Client for the hosted three-class sentiment model.

    Every call is a single POST of ``{"inputs": text}``; failures surface
    immediately as InferenceError and are never retried.
    """

    def __init__(
        self,
        *,
        model_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.model_url = model_url
        self.api_key = (api_key or "").strip() or None
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        if self.api_key:
            headers["authorization"] = f"Bearer {self.api_key}"
        return headers

    def _parse(self, response: httpx.Response) -> SentimentOutcome:
        if response.status_code >= 400:
            observability.SENTIMENT_REQUESTS.labels(status="http_error").inc()
            logger.error("Sentiment model returned HTTP %s", response.status_code)
            raise InferenceError(
                "sentiment_http_error",
                f"Sentiment service error: HTTP {response.status_code}",
            )
        try:
            payload: Any = response.json()
        except ValueError as exc:
            observability.SENTIMENT_REQUESTS.labels(status="malformed").inc()
            raise InferenceError("sentiment_malformed", "Sentiment service returned invalid JSON") from exc
        try:
            outcome = normalize_sentiment_output(payload)
        except InferenceError:
            observability.SENTIMENT_REQUESTS.labels(status="malformed").inc()
            raise
        observability.SENTIMENT_REQUESTS.labels(status="success").inc()
        return outcome

    def _transport_error(self, exc: httpx.HTTPError) -> InferenceError:
        observability.SENTIMENT_REQUESTS.labels(status="transport_error").inc()
        logger.error("Sentiment request failed: %s", exc)
        if isinstance(exc, httpx.TimeoutException):
            return InferenceError("sentiment_timeout", "Sentiment service timed out", status_code=504)
        return InferenceError("sentiment_unavailable", f"Sentiment service unreachable: {exc}")

    def analyze(self, text: str) -> SentimentOutcome:
        payload = {"inputs": _require_text(text)}
        started = time.monotonic()
        try:
            if self._http_client is not None:
                response = self._http_client.post(self.model_url, headers=self._headers(), json=payload)
            else:
                with httpx.Client(timeout=self.timeout_seconds) as client:
                    response = client.post(self.model_url, headers=self._headers(), json=payload)
        except httpx.HTTPError as exc:
            raise self._transport_error(exc) from exc
        finally:
            observability.SENTIMENT_LATENCY.observe(time.monotonic() - started)
        return self._parse(response)

    async def _analyze_async(self, client: httpx.AsyncClient, text: str) -> SentimentOutcome:
        started = time.monotonic()
        try:
            response = await client.post(self.model_url, headers=self._headers(), json={"inputs": text})
        except httpx.HTTPError as exc:
            raise self._transport_error(exc) from exc
        finally:
            observability.SENTIMENT_LATENCY.observe(time.monotonic() - started)
        return self._parse(response)

    async def analyze_many(self, texts: Sequence[str]) -> list[SentimentOutcome]:
        """Analyze texts concurrently; all results or the first failure.

        Every call runs to completion before a failure is raised, and the
        failure reported is the earliest one in input order.
        """
        cleaned = [_require_text(text) for text in texts]
        if not cleaned:
            return []
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            results = await asyncio.gather(
                *(self._analyze_async(client, text) for text in cleaned),
                return_exceptions=True,
            )
        for result in results:
            if isinstance(result, BaseException):
                observability.SENTIMENT_BATCHES.labels(status="failed").inc()
                raise result
        observability.SENTIMENT_BATCHES.labels(status="success").inc()
        return list(results)

    def analyze_many_sync(self, texts: Sequence[str]) -> list[SentimentOutcome]:
        """Synchronous wrapper for analyze_many."""
        coro = self.analyze_many(texts)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        # Running inside an event loop; execute in a dedicated thread.
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(lambda: asyncio.run(coro))
            return future.result()


def build_sentiment_client() -> SentimentClient:
    return SentimentClient(
        model_url=settings.sentiment_model_url,
        api_key=settings.sentiment_api_key,
        timeout_seconds=settings.sentiment_timeout_seconds,
    )
