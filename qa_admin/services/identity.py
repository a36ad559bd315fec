"""Admin client for the external identity provider.

The provider owns credentials; the dashboard keeps its own ``users`` row
under the same id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from qa_admin.config import settings
from qa_admin.errors import StoreError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentitySession:
    access_token: str
    expires_in: int | None
    user_id: str


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("msg", "message", "error_description", "error"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {response.status_code}"


class IdentityAdminClient:
    def __init__(
        self,
        *,
        base_url: str,
        service_key: str | None,
        timeout_seconds: float = 15.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_key = (service_key or "").strip() or None
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        if self.service_key:
            headers["apikey"] = self.service_key
            headers["authorization"] = f"Bearer {self.service_key}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._http_client is not None:
                return self._http_client.request(method, url, headers=self._headers(), **kwargs)
            with httpx.Client(timeout=self.timeout_seconds) as client:
                return client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Identity request %s %s failed: %s", method, path, exc)
            raise StoreError("identity_unavailable", f"Identity service unreachable: {exc}") from exc

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.status_code < 400:
            return
        message = _error_message(response)
        logger.error("Identity %s failed with HTTP %s: %s", action, response.status_code, message)
        if response.status_code < 500:
            raise ValidationError(f"identity_{action}_rejected", message)
        raise StoreError(f"identity_{action}_failed", message)

    def create_user(self, *, email: str, password: str, metadata: dict[str, Any] | None = None) -> str:
        response = self._request(
            "POST",
            "/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata or {},
            },
        )
        self._raise_for_status(response, "create")
        user_id = (response.json() or {}).get("id")
        if not user_id:
            raise StoreError("identity_create_failed", "Identity service returned no user id")
        return str(user_id)

    def update_password(self, user_id: str, password: str) -> None:
        response = self._request("PUT", f"/admin/users/{user_id}", json={"password": password})
        self._raise_for_status(response, "update")

    def delete_user(self, user_id: str) -> None:
        response = self._request("DELETE", f"/admin/users/{user_id}")
        self._raise_for_status(response, "delete")

    def sign_in(self, email: str, password: str) -> IdentitySession | None:
        """Password sign-in. Returns None when the credentials are rejected."""
        response = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in (400, 401, 403):
            return None
        self._raise_for_status(response, "sign_in")
        data = response.json() or {}
        user = data.get("user") or {}
        return IdentitySession(
            access_token=str(data.get("access_token") or ""),
            expires_in=data.get("expires_in"),
            user_id=str(user.get("id") or ""),
        )


def build_identity_client() -> IdentityAdminClient:
    return IdentityAdminClient(
        base_url=settings.identity_url,
        service_key=settings.identity_service_key,
        timeout_seconds=settings.identity_timeout_seconds,
    )
