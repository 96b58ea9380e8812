"""
Shared dependencies for API routes.
"""

import logging

from fastapi import HTTPException, Request

from virtual_assistant.accounts import AccountStore, MediaUploader, TokenError, read_token
from virtual_assistant.classifier import IntentClassifier
from virtual_assistant.config import Config

logger = logging.getLogger(__name__)


def get_app_config(request: Request) -> Config:
    return request.app.state.config


def get_store(request: Request) -> AccountStore:
    return request.app.state.store


def get_uploader(request: Request) -> MediaUploader:
    return request.app.state.uploader


def get_classifier(request: Request) -> IntentClassifier:
    """Get the app's classifier, loading the configured backend on first use."""
    state = request.app.state
    if state.classifier is None:
        cfg = state.config.classifier
        kwargs = {}
        if cfg.api_key:
            kwargs["api_key"] = cfg.api_key
        if cfg.host:
            kwargs["host"] = cfg.host
        logger.info("Loading classifier backend: %s", cfg.backend)
        try:
            state.classifier = IntentClassifier.from_backend(
                cfg.backend,
                model=cfg.model,
                language=cfg.language,
                **kwargs,
            )
        except (ImportError, ValueError) as e:
            logger.error("Could not load classifier backend %s: %s", cfg.backend, e)
            raise HTTPException(status_code=503, detail="Classifier unavailable")
    return state.classifier


def current_user_id(request: Request) -> str:
    """Resolve the signed-in user from the session cookie."""
    config: Config = request.app.state.config
    token = request.cookies.get(config.auth.cookie_name)

    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized: token not found")

    if not config.auth.jwt_secret:
        logger.error("JWT secret is not set")
        raise HTTPException(status_code=500, detail="Server misconfiguration: JWT secret missing")

    try:
        return read_token(token, config.auth.jwt_secret)
    except TokenError as e:
        logger.info("Rejected session token: %s", e)
        raise HTTPException(status_code=401, detail="Unauthorized: invalid token")
