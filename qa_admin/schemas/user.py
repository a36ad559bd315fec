from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from qa_admin.models.user import UserRole


class UserBase(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    email: EmailStr
    role: UserRole = UserRole.agent
    team_leader_id: UUID | None = None


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=128)

    @model_validator(mode="after")
    def _check_hierarchy(self) -> UserCreate:
        if self.role == UserRole.team_leader:
            self.team_leader_id = None
        elif self.team_leader_id is None:
            raise ValueError("An agent must be assigned to a team leader")
        return self


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    role: UserRole | None = None
    team_leader_id: UUID | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    email: str
    role: UserRole
    team_leader_id: UUID | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
