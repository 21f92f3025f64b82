from datetime import datetime, timedelta, timezone
import logging
import uuid

from fastapi import Depends, Request, HTTPException, status
from jose import jwt, JWTError
import bcrypt
from sqlalchemy.orm import Session

from goalforge.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS
from goalforge.database import get_db
from goalforge.models.session import AuthSession

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


def create_token(data: dict) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS)
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


# --- Sessions ---
def register_session(db: Session, user_id: str, jti: str, user_agent: str | None = None) -> None:
    try:
        db.add(AuthSession(user_id=user_id, token_jti=jti, user_agent=user_agent, is_revoked=False))
        db.commit()
    except Exception:
        db.rollback()
        raise


def revoke_session(db: Session, jti: str) -> bool:
    session = db.query(AuthSession).filter_by(token_jti=jti).first()
    if session is None:
        return False
    try:
        session.is_revoked = True
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True


def is_session_valid(db: Session, jti: str) -> bool:
    """A token is valid only while its session exists and has not been revoked."""
    session = db.query(AuthSession).filter_by(token_jti=jti).first()
    return session is not None and not session.is_revoked


def _bearer_payload(request: Request) -> dict:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = auth_header.split(" ", 1)[1]
    payload = verify_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("user_id") is None or payload.get("jti") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token payload missing required claims",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_token_payload(request: Request, db: Session = Depends(get_db)) -> dict:
    """
    FastAPI dependency: extracts the Bearer token from the Authorization
    header, verifies it and checks that its session is still active.
    Raises HTTP 401 if the token is missing, invalid or revoked.
    """
    payload = _bearer_payload(request)
    if not is_session_valid(db, payload["jti"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has been revoked or logged out",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_current_user(payload: dict = Depends(get_token_payload)) -> str:
    """FastAPI dependency: the authenticated user's id."""
    return payload["user_id"]
