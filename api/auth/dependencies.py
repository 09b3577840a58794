"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Header, HTTPException, status

from core.errors import Forbidden, NotFound
from core.ids import is_valid_id, normalize_id
from resolution import service as resolution
from store.registry import ResourceKind

from . import security


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise _unauthorized("Authentication required.")

    scheme, _, token = raw.partition(" ")
    if scheme.strip().lower() != "bearer" or not token.strip():
        raise _unauthorized("Authorization must be: Bearer <token>.")
    return token.strip()


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict[str, Any]:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise _unauthorized(str(exc)) from exc

    subject = str(payload.get("sub") or "").strip()
    if not is_valid_id(subject):
        raise _unauthorized("Invalid access token subject.")

    try:
        return await resolution.fetch_document_by_id(ResourceKind.USER, normalize_id(subject))
    except NotFound as exc:
        raise _unauthorized("User not found.") from exc


def ensure_owner(record: dict[str, Any], user: dict[str, Any], message: str | None = None) -> dict[str, Any]:
    """
    Raise Forbidden unless `record` belongs to `user`.
    """
    if str(record.get("user_id")) != str(user.get("id")):
        raise Forbidden(message)
    return record
