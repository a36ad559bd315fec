"""Unified error taxonomy for QA dashboard services."""

from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


@dataclass(frozen=True)
class DashboardError(Exception):
    code: str
    detail: str
    status_code: int = 400
    field_errors: dict[str, list[str]] | None = field(default=None, hash=False)

    def __str__(self) -> str:
        return self.detail

    def to_payload(self) -> dict:
        return {"code": self.code, "detail": self.detail, "errors": self.field_errors or {}}


class ValidationError(DashboardError):
    def __init__(self, code: str, detail: str, field_errors: dict[str, list[str]] | None = None):
        super().__init__(code=code, detail=detail, status_code=400, field_errors=field_errors)


class NotFoundError(DashboardError):
    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail, status_code=404)


class HierarchyMismatch(DashboardError):
    def __init__(self, agent_id: str, team_leader_id: str):
        super().__init__(
            code="hierarchy_mismatch",
            detail=f"Agent {agent_id} does not report to team leader {team_leader_id}",
            status_code=409,
        )


class InferenceError(DashboardError):
    def __init__(self, code: str, detail: str, status_code: int = 502):
        super().__init__(code=code, detail=detail, status_code=status_code)


class StoreError(DashboardError):
    def __init__(self, code: str, detail: str, field_errors: dict[str, list[str]] | None = None):
        super().__init__(code=code, detail=detail, status_code=500, field_errors=field_errors)


async def _dashboard_error_handler(_request: Request, exc: DashboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DashboardError, _dashboard_error_handler)
