"""
user_service.py — Accounts and profiles
Signup, login and profile updates. Sessions and tokens are handled by auth.py.
"""

import logging
from typing import Optional

from goalforge.auth import hash_password, verify_password
from goalforge.errors import AuthenticationError, NotFoundError, ValidationError
from goalforge.record_store import RecordStore
from goalforge.schemas import user_adapter
from goalforge.services.task_service import TaskService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "email", "avatar", "title", "role", "department")


class UserService:
    @staticmethod
    def signup(store: RecordStore, name: str, email: str, password: str):
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if not email or "@" not in email:
            raise ValidationError("A valid email is required")
        if not password:
            raise ValidationError("Password is required for signup")
        if store.find_user_by_email(email) is not None:
            raise ValidationError("User with this email already exists")

        user = store.upsert(user_adapter.validate_python({
            "name": name.strip(),
            "email": email.strip(),
            "role": "employee",
        }))
        store.set_password_hash(user.id, hash_password(password))
        TaskService.ensure_default_list(store, user.id)
        logger.info(f"Registered user {user.id}")
        return user

    @staticmethod
    def login(store: RecordStore, email: str, password: str):
        user = store.find_user_by_email(email or "")
        if user is None:
            raise AuthenticationError("User not found. Please sign up.")
        hashed = store.get_password_hash(user.id)
        if not hashed or not verify_password(password or "", hashed):
            raise AuthenticationError("Invalid email or password")
        TaskService.ensure_default_list(store, user.id)
        return user

    @staticmethod
    def get(store: RecordStore, user_id: str):
        user = store.get_user(user_id)
        if user is None:
            raise NotFoundError("User record not found")
        return user

    @staticmethod
    def update_profile(store: RecordStore, user_id: str, updates: dict, password: Optional[str] = None):
        """Apply profile changes; role changes re-validate the user variant."""
        user = UserService.get(store, user_id)
        changes = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
        if "email" in changes:
            other = store.find_user_by_email(changes["email"])
            if other is not None and other.id != user_id:
                raise ValidationError("User with this email already exists")
        try:
            updated = user_adapter.validate_python({**user.model_dump(), **changes})
        except ValueError as e:
            # e.g. a department head without a department
            raise ValidationError(str(e)) from e
        store.upsert(updated)
        if password:
            store.set_password_hash(user_id, hash_password(password))
        return updated
