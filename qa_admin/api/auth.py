import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from qa_admin.api.deps import get_current_user, get_current_user_or_none, get_db, get_identity_client
from qa_admin.config import settings
from qa_admin.models.user import User
from qa_admin.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    user: UserRead


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    identity=Depends(get_identity_client),
):
    session = identity.sign_in(str(payload.email), payload.password)
    if session is None or not session.access_token:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    user = db.query(User).filter(User.email == str(payload.email).lower()).first()
    if user is None or not user.is_active:
        raise HTTPException(status_code=403, detail="Account is not active")
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        max_age=session.expires_in,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return LoginResponse(
        access_token=session.access_token,
        expires_in=session.expires_in,
        user=UserRead.model_validate(user),
    )


@router.post("/logout")
def logout(response: Response, user: User | None = Depends(get_current_user_or_none)):
    if user is not None:
        logger.info("User %s signed out", user.id)
    response.delete_cookie(settings.session_cookie_name)
    return {"status": "ok"}


@router.get("/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return user
