"""
Auth REST API routes: signup, signin, logout.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from virtual_assistant.accounts import (
    AccountStore,
    DuplicateEmailError,
    Profile,
    hash_password,
    issue_token,
    verify_password,
)
from virtual_assistant.config import Config
from virtual_assistant.server.deps import get_app_config, get_store
from virtual_assistant.server.schemas import MessageResponse, SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


def _set_session_cookie(response: Response, user_id: str, config: Config) -> None:
    try:
        token = issue_token(user_id, config.auth.jwt_secret, config.auth.expires_days)
    except ValueError as e:
        logger.error("Token generation error: %s", e)
        raise HTTPException(status_code=500, detail="Server misconfiguration: JWT secret missing")

    response.set_cookie(
        key=config.auth.cookie_name,
        value=token,
        max_age=config.auth.expires_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=config.auth.cookie_secure,
    )


@router.post("/signup", response_model=Profile, status_code=201)
def signup(
    request: SignUpRequest,
    response: Response,
    store: AccountStore = Depends(get_store),
    config: Config = Depends(get_app_config),
) -> Profile:
    """Register an account and start a session."""
    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    try:
        account = store.create(request.name, request.email, hash_password(request.password))
    except DuplicateEmailError:
        raise HTTPException(status_code=400, detail="Email already exists")

    _set_session_cookie(response, account.id, config)
    return account.to_profile()


@router.post("/signin", response_model=Profile)
def signin(
    request: SignInRequest,
    response: Response,
    store: AccountStore = Depends(get_store),
    config: Config = Depends(get_app_config),
) -> Profile:
    """Sign in and start a session."""
    account = store.find_by_email(request.email)
    if account is None:
        raise HTTPException(status_code=400, detail="Email does not exist")

    if not verify_password(request.password, account.password_hash):
        raise HTTPException(status_code=400, detail="Incorrect password")

    _set_session_cookie(response, account.id, config)
    return account.to_profile()


@router.get("/logout", response_model=MessageResponse)
def logout(response: Response, config: Config = Depends(get_app_config)) -> MessageResponse:
    """End the session."""
    response.delete_cookie(config.auth.cookie_name, httponly=True, samesite="lax")
    return MessageResponse(message="Logged out successfully")
