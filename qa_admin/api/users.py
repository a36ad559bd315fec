from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from qa_admin.api.deps import get_db, get_identity_client
from qa_admin.schemas.common import ListResponse
from qa_admin.schemas.user import UserCreate, UserRead, UserUpdate
from qa_admin.services.response import list_response
from qa_admin.services.users import users

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db), identity=Depends(get_identity_client)):
    return users.create(db, payload, identity)


@router.get("", response_model=ListResponse[UserRead])
def list_users(
    role: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    team_leader_id: str | None = None,
    order_by: str = Query(default="name"),
    order_dir: str = Query(default="asc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    items = users.list(
        db,
        role=role,
        is_active=is_active,
        search=search,
        team_leader_id=team_leader_id,
        order_by=order_by,
        order_dir=order_dir,
        limit=limit,
        offset=offset,
    )
    return list_response(items, limit, offset)


@router.get("/team-leaders", response_model=list[UserRead])
def list_team_leaders(db: Session = Depends(get_db)):
    return users.team_leaders(db)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return users.get(db, user_id)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    identity=Depends(get_identity_client),
):
    return users.update(db, user_id, payload, identity)


@router.post("/{user_id}/toggle-status", response_model=UserRead)
def toggle_user_status(user_id: str, db: Session = Depends(get_db)):
    return users.toggle_status(db, user_id)
