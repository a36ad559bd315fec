from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from qa_admin.errors import HierarchyMismatch
from qa_admin.models.user import UserRole
from qa_admin.services import observability


class SubjectKind(enum.Enum):
    agent = "agent"
    team_leader = "team_leader"


@dataclass(frozen=True)
class SubjectResolution:
    kind: SubjectKind
    subject_id: str
    agent_ids: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.agent_ids


def _key(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _is_agent(member: Any) -> bool:
    role = getattr(member, "role", None)
    if isinstance(role, UserRole):
        return role == UserRole.agent
    return str(role) == UserRole.agent.value


def find_member(roster: Iterable[Any], member_id: str | None) -> Any | None:
    key = _key(member_id)
    if key is None:
        return None
    return next((member for member in roster if _key(member.id) == key), None)


def team_agent_ids(roster: Iterable[Any], team_leader_id: str) -> list[str]:
    key = _key(team_leader_id)
    return [
        str(member.id)
        for member in roster
        if _is_agent(member) and _key(getattr(member, "team_leader_id", None)) == key
    ]


def resolve_subject(
    roster: Iterable[Any],
    *,
    agent_id: str | None = None,
    team_leader_id: str | None = None,
) -> SubjectResolution | None:
    """Resolve the agent ids whose records a request covers.

    An agent id is passed through even when it is missing from the roster.
    A team leader expands to their agents. When both are given they must
    agree, otherwise HierarchyMismatch is raised. Returns None when neither
    is given.
    """
    roster = list(roster)
    agent_key = _key(agent_id)
    team_key = _key(team_leader_id)

    if agent_key and team_key:
        agent = find_member(roster, agent_key)
        recorded = _key(getattr(agent, "team_leader_id", None)) if agent is not None else None
        if recorded != team_key:
            observability.HIERARCHY_MISMATCHES.inc()
            raise HierarchyMismatch(agent_key, team_key)
        return SubjectResolution(kind=SubjectKind.agent, subject_id=agent_key, agent_ids=[agent_key])
    if agent_key:
        return SubjectResolution(kind=SubjectKind.agent, subject_id=agent_key, agent_ids=[agent_key])
    if team_key:
        return SubjectResolution(
            kind=SubjectKind.team_leader,
            subject_id=team_key,
            agent_ids=team_agent_ids(roster, team_key),
        )
    return None
