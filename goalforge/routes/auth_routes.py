"""
Auth routes: signup, login, logout and profile management.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from goalforge.auth import create_token, get_token_payload, register_session, revoke_session, verify_token
from goalforge.database import get_db
from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import get_current_account, http_error, ok
from goalforge.services.user_service import UserService

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class SignupRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    title: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    password: Optional[str] = None


def _issue_token(db: Session, user, request: Request) -> str:
    token = create_token({"user_id": user.id, "email": user.email, "role": user.role})
    jti = verify_token(token)["jti"]
    register_session(db, user.id, jti, request.headers.get("user-agent"))
    return token


# ── Routes ────────────────────────────────────────────────────────
@router.post("/signup")
async def signup(
    body: SignupRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: RecordStore = Depends(get_store),
):
    """Register a new account and log it in."""
    try:
        user = UserService.signup(store, body.name, body.email, body.password)
        token = _issue_token(db, user, request)
        return ok({"token": token, "user": user.model_dump(mode="json")})
    except Exception as e:
        raise http_error(e)


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: RecordStore = Depends(get_store),
):
    """Authenticate with email + password."""
    try:
        user = UserService.login(store, body.email, body.password)
        token = _issue_token(db, user, request)
        return ok({"token": token, "user": user.model_dump(mode="json")})
    except Exception as e:
        raise http_error(e)


@router.post("/logout")
async def logout(payload: dict = Depends(get_token_payload), db: Session = Depends(get_db)):
    """Revoke the session behind the presented token."""
    try:
        revoke_session(db, payload["jti"])
        return ok({"message": "Logged out"})
    except Exception as e:
        raise http_error(e)


@router.get("/me")
async def me(user=Depends(get_current_account)):
    return ok(user.model_dump(mode="json"))


@router.put("/me")
async def update_me(
    body: ProfileUpdate,
    user=Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    """Update profile fields and, optionally, the password."""
    try:
        updates = body.model_dump(exclude_unset=True)
        password = updates.pop("password", None)
        updated = UserService.update_profile(store, user.id, updates, password=password)
        return ok(updated.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)
