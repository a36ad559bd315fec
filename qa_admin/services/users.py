from __future__ import annotations

import builtins
import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qa_admin.errors import DashboardError, StoreError, ValidationError
from qa_admin.models.user import User, UserRole
from qa_admin.schemas.user import UserCreate, UserUpdate
from qa_admin.services import observability
from qa_admin.services.common import (
    apply_is_active_filter,
    apply_ordering,
    apply_pagination,
    coerce_uuid,
    get_or_404,
    validate_enum,
)
from qa_admin.services.identity import IdentityAdminClient
from qa_admin.services.response import ListResponseMixin

logger = logging.getLogger(__name__)

_DUPLICATE_MARKERS = ("already registered", "already exists", "users_email_key")


def _duplicate_email() -> ValidationError:
    return ValidationError(
        "email_taken",
        "User with this email already exists.",
        field_errors={"email": ["Email already taken"]},
    )


def _resolve_team_leader(db: Session, role: UserRole, team_leader_id) -> User | None:
    if role == UserRole.team_leader:
        return None
    if team_leader_id is None:
        raise ValidationError(
            "team_leader_required",
            "Team Leader is required for agents",
            field_errors={"team_leader_id": ["Team Leader is required for agents"]},
        )
    leader = db.get(User, coerce_uuid(team_leader_id))
    if leader is None or leader.role != UserRole.team_leader or not leader.is_active:
        raise ValidationError(
            "invalid_team_leader",
            "Selected team leader is not an active team leader",
            field_errors={"team_leader_id": ["Select an active team leader"]},
        )
    return leader


def _has_agents(db: Session, leader: User) -> bool:
    return db.query(User.id).filter(User.team_leader_id == leader.id).first() is not None


class Users(ListResponseMixin):
    @staticmethod
    def create(db: Session, payload: UserCreate, identity: IdentityAdminClient) -> User:
        """Create the identity account first, then the dashboard row under the same id.

        A failed insert deletes the identity account again.
        """
        email = str(payload.email).strip().lower()
        if db.query(User.id).filter(User.email == email).first() is not None:
            raise _duplicate_email()
        leader = _resolve_team_leader(db, payload.role, payload.team_leader_id)

        try:
            account_id = identity.create_user(
                email=email,
                password=payload.password,
                metadata={"name": payload.name, "role": payload.role.value},
            )
        except ValidationError as exc:
            if any(marker in exc.detail.lower() for marker in _DUPLICATE_MARKERS):
                raise _duplicate_email() from exc
            raise

        user = User(
            id=coerce_uuid(account_id),
            name=payload.name.strip(),
            email=email,
            role=payload.role,
            team_leader_id=leader.id if leader is not None else None,
            is_active=True,
        )
        db.add(user)
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to insert user %s: %s", email, exc)
            try:
                identity.delete_user(account_id)
                logger.info("Removed identity account %s after failed insert", account_id)
            except DashboardError as cleanup_exc:
                observability.USER_ACCOUNT_EVENTS.labels(event="cleanup_failed").inc()
                logger.error("Failed to clean up identity account %s: %s", account_id, cleanup_exc)
            raise StoreError(
                "user_save_failed",
                f"Failed to save user details to database: {exc}",
            ) from exc
        db.refresh(user)
        observability.USER_ACCOUNT_EVENTS.labels(event="created").inc()
        logger.info("Created %s account %s", user.role.value, user.id)
        return user

    @staticmethod
    def get(db: Session, user_id: str) -> User:
        return get_or_404(db, User, user_id, detail="User not found")

    @staticmethod
    def list(
        db: Session,
        role: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        team_leader_id: str | None = None,
        order_by: str = "name",
        order_dir: str = "asc",
        limit: int = 50,
        offset: int = 0,
    ) -> builtins.list[User]:
        query = db.query(User)
        query = apply_is_active_filter(query, User, is_active)
        role_value = validate_enum(role, UserRole, "role")
        if role_value is not None:
            query = query.filter(User.role == role_value)
        if team_leader_id:
            query = query.filter(User.team_leader_id == coerce_uuid(team_leader_id))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {"name": User.name, "email": User.email, "created_at": User.created_at, "role": User.role},
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def roster(db: Session) -> builtins.list[User]:
        return db.query(User).filter(User.is_active.is_(True)).order_by(User.name.asc()).all()

    @staticmethod
    def team_leaders(db: Session) -> builtins.list[User]:
        return (
            db.query(User)
            .filter(User.role == UserRole.team_leader, User.is_active.is_(True))
            .order_by(User.name.asc())
            .all()
        )

    @staticmethod
    def update(db: Session, user_id: str, payload: UserUpdate, identity: IdentityAdminClient) -> User:
        """Update profile fields, then the password if one was supplied."""
        user = get_or_404(db, User, user_id, detail="User not found")
        data = payload.model_dump(exclude_unset=True)
        password = data.pop("password", None)

        role = data.get("role") or user.role
        role_changed = role != user.role
        if role_changed and user.role == UserRole.team_leader and _has_agents(db, user):
            raise ValidationError(
                "team_has_agents",
                "Reassign this team leader's agents before changing the role",
                field_errors={"role": ["Team leader still has agents assigned"]},
            )

        # The current leader is only re-validated when the assignment changes.
        if role_changed or "team_leader_id" in data:
            team_leader_id = data["team_leader_id"] if "team_leader_id" in data else user.team_leader_id
            if role == UserRole.agent and str(team_leader_id) == str(user.id):
                raise ValidationError(
                    "invalid_team_leader",
                    "A user cannot lead themselves",
                    field_errors={"team_leader_id": ["Select another team leader"]},
                )
            leader = _resolve_team_leader(db, role, team_leader_id)
            user.team_leader_id = leader.id if leader is not None else None

        if data.get("name") is not None:
            user.name = data["name"].strip()
        user.role = role
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to update user %s: %s", user_id, exc)
            raise StoreError("user_update_failed", f"Failed to update user details: {exc}") from exc
        db.refresh(user)
        observability.USER_ACCOUNT_EVENTS.labels(event="updated").inc()

        if password:
            try:
                identity.update_password(str(user.id), password)
            except DashboardError as exc:
                logger.error("Password update failed for user %s: %s", user.id, exc)
                raise StoreError(
                    "password_update_failed",
                    f"Failed to update password: {exc.detail}. "
                    "User details updated, but password remains unchanged.",
                    field_errors={"password": ["Failed to update password."]},
                ) from exc
        return user

    @staticmethod
    def set_active(db: Session, user_id: str, is_active: bool) -> User:
        user = get_or_404(db, User, user_id, detail="User not found")
        user.is_active = is_active
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError("user_status_failed", f"Failed to update user status: {exc}") from exc
        db.refresh(user)
        event = "activated" if is_active else "deactivated"
        observability.USER_ACCOUNT_EVENTS.labels(event=event).inc()
        logger.info("User %s %s", user.id, event)
        return user

    @staticmethod
    def toggle_status(db: Session, user_id: str) -> User:
        user = get_or_404(db, User, user_id, detail="User not found")
        return Users.set_active(db, user_id, not user.is_active)


users = Users()
