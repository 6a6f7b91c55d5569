"""
Request authentication for the content API.

Authors act on their own content (`get_current_user`); settings, account and
asset maintenance routes are gated with `require_admin`.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Depends, Header, HTTPException, status

from . import service


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise _unauthorized("Missing Authorization header.")

    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Authorization must be: Bearer <token>.")
    return token.strip()


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict:
    return await service.get_user_from_access_token(access_token)


def require_role(role: str) -> Callable[..., Awaitable[dict]]:
    async def dependency(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.capitalize()} role required.",
            )
        return current_user

    return dependency


require_admin = require_role("admin")
