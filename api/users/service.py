"""
User business logic.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from auth import security
from core.errors import DuplicateField, ValidationFailure
from core.ids import new_id
from resolution import service as resolution
from store.registry import ResourceKind, registry

from . import schemas

logger = logging.getLogger(__name__)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]{3,32}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_new_user(payload: schemas.UserCreateRequest) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not _USERNAME_RE.match(payload.username.strip()):
        errors["username"] = "Username must be 3-32 letters, digits, '.', '_' or '-'"
    if not _EMAIL_RE.match(normalize_email(payload.email)):
        errors["email"] = "Email is invalid"
    if len(payload.password) < 8:
        errors["password"] = "Password must be at least 8 characters"
    return errors


def to_user_response(user_row: dict[str, Any]) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(user_row["id"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
        created_at=user_row.get("created_at"),
    )


async def create_user(payload: schemas.UserCreateRequest) -> dict[str, str]:
    errors = validate_new_user(payload)
    if errors:
        raise ValidationFailure(errors, message="Invalid user data")

    username = payload.username.strip()
    email = normalize_email(payload.email)
    store = registry.get(ResourceKind.USER)

    taken: dict[str, str] = {}
    for field, value in (("username", username), ("email", email)):
        if await store.count({field: value}) > 0:
            taken[field] = f"This {field} is taken"
    if taken:
        raise DuplicateField(taken)

    user = await store.save(
        {
            "id": new_id(),
            "username": username,
            "email": email,
            "password_hash": security.hash_password(payload.password),
        }
    )
    logger.info("user_created user_id=%s", user["id"])
    return {"id": str(user["id"])}


async def get_user(user_id: str) -> schemas.UserResponse:
    user = await resolution.fetch_document_by_id(ResourceKind.USER, user_id)
    return to_user_response(user)


async def get_user_locations(user_id: str) -> list[dict[str, Any]]:
    user = await resolution.fetch_document_by_id(ResourceKind.USER, user_id, "locations")
    return list(user.get("locations") or [])
