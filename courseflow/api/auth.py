"""JSON auth endpoints (/auth/register, /auth/login, /auth/logout, /auth/me).

Register and login both return { accessToken, tokenType, user } so a client
can keep the token in memory and call the v1 API immediately.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from courseflow.api.dependencies import CurrentActor, PlatformDep, RawToken
from courseflow.api.schemas import AuthResponse, LoginIn, RegisterIn, UserOut
from courseflow.core.errors import NotFound, Unauthenticated

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: RegisterIn, platform: PlatformDep) -> AuthResponse:
    # Self-registration always yields a student; admins are seeded.
    user = platform.auth.register(payload.email, payload.password, payload.name)
    return AuthResponse(accessToken=platform.auth.issue(user), user=UserOut.of(user))


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginIn, platform: PlatformDep) -> AuthResponse:
    user = platform.auth.authenticate(payload.email, payload.password)
    if user is None:
        raise Unauthenticated("invalid email or password")
    return AuthResponse(accessToken=platform.auth.issue(user), user=UserOut.of(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(platform: PlatformDep, raw_token: RawToken) -> Response:
    """Revoke the presented token.

    Idempotent: a missing, invalid or already-revoked token still yields 204,
    since "this token no longer works" is already true.
    """
    platform.auth.invalidate(raw_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserOut)
def me(actor: CurrentActor, platform: PlatformDep) -> UserOut:
    user_id = actor.require_id()
    user = platform.stores.users.get_by_id(user_id)
    if user is None:
        raise NotFound("user", user_id)
    return UserOut.of(user)
