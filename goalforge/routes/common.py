import logging

from fastapi import Depends, HTTPException
from pydantic import ValidationError as PydanticValidationError

from goalforge.auth import get_current_user
from goalforge.errors import GoalForgeError, NotFoundError
from goalforge.record_store import RecordStore, get_store
from goalforge.services.ai_service import AIService
from goalforge.services.llm_router import get_llm_router

logger = logging.getLogger(__name__)


def http_error(e: Exception) -> HTTPException:
    """Translate a service error into the HTTP error the client sees."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, GoalForgeError):
        return HTTPException(status_code=e.status_code, detail=e.message)
    if isinstance(e, PydanticValidationError):
        return HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    logger.exception("Unhandled error while serving request")
    return HTTPException(status_code=500, detail=str(e))


def ok(data=None) -> dict:
    if data is None:
        return {"status": "success"}
    return {"status": "success", "data": data}


async def get_current_account(
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """FastAPI dependency: the authenticated user's full record (employee or department head)."""
    user = store.get_user(user_id)
    if user is None:
        raise http_error(NotFoundError("User record not found"))
    return user


def get_ai_service() -> AIService:
    return AIService(get_llm_router())
