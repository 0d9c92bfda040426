"""
Authentication endpoints - Google OAuth login and session tokens
"""
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from event_booking.api.deps import get_oauth_client, get_user_service
from event_booking.core.config import settings
from event_booking.core.security import (
    AuthenticationError,
    CurrentUser,
    create_access_token,
    get_current_user,
)
from event_booking.middleware.rate_limiter import limiter
from event_booking.schemas import UserResponse
from event_booking.services import GoogleOAuthClient, OAuthError, UserService
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE = "oauth_state"
SUCCESS_PATH = "/api/v1/auth/success"
FAILURE_PATH = "/api/v1/auth/failure"


@router.get("/auth/google")
@limiter.limit("20/minute")
async def google_login(
    request: Request,
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
):
    """Redirect to Google's consent screen"""
    state = secrets.token_urlsafe(32)
    response = RedirectResponse(oauth_client.authorization_url(state), status_code=302)
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=settings.OAUTH_STATE_TTL_SECONDS,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/auth/google/callback")
@limiter.limit("20/minute")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    user_service: UserService = Depends(get_user_service),
):
    """
    Complete the OAuth flow: verify state, exchange the code, find or
    create the user and set the session token cookie
    """
    expected_state = request.cookies.get(STATE_COOKIE)
    if error or not code or not state or not expected_state:
        logger.warning(f"OAuth callback rejected: error={error!r}")
        return RedirectResponse(FAILURE_PATH, status_code=302)
    if not secrets.compare_digest(state, expected_state):
        logger.warning("OAuth callback rejected: state mismatch")
        return RedirectResponse(FAILURE_PATH, status_code=302)

    try:
        profile = await oauth_client.fetch_profile(code)
    except OAuthError as e:
        logger.warning(f"OAuth callback rejected: {e}")
        return RedirectResponse(FAILURE_PATH, status_code=302)

    user = await user_service.get_or_create(
        email=profile.email,
        name=profile.name,
        image=profile.image,
        provider=profile.provider,
    )
    token = create_access_token(user)

    response = RedirectResponse(SUCCESS_PATH, status_code=302)
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    response.delete_cookie(STATE_COOKIE)
    logger.info(f"User {user.id} logged in", extra={"user_id": user.id})
    return response


@router.get("/auth/success")
async def login_success():
    return {"message": "Login successful"}


@router.get("/auth/failure")
async def login_failure():
    return JSONResponse(status_code=401, content={"message": "Login failed"})


@router.get("/auth/me", response_model=UserResponse)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Profile of the authenticated user"""
    user = await user_service.get_by_id(current_user.id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    return UserResponse.model_validate(user)


@router.post("/auth/logout")
async def logout():
    response = JSONResponse(content={"message": "Logged out"})
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return response
