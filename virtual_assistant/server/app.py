"""
FastAPI application for the Virtual Assistant backend.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from virtual_assistant import __version__
from virtual_assistant.accounts import AccountStore, MediaUploader
from virtual_assistant.classifier import IntentClassifier
from virtual_assistant.config import Config, get_config
from virtual_assistant.server.schemas import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    config: Config = app.state.config

    if not config.auth.jwt_secret:
        logger.warning("VIRTUAL_ASSISTANT_JWT_SECRET is not set; sign-in will fail")
    if not config.media.enabled:
        logger.info("Cloudinary not configured; image uploads are disabled")

    yield

    app.state.uploader.close()


def create_app(
    config: Optional[Config] = None,
    store: Optional[AccountStore] = None,
    classifier: Optional[IntentClassifier] = None,
    uploader: Optional[MediaUploader] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Configuration (default: global config)
        store: Account store (default: from config.storage)
        classifier: Intent classifier (default: loaded from config on first use)
        uploader: Media uploader (default: from config.media)

    Returns:
        FastAPI application
    """
    config = config or get_config()

    app = FastAPI(
        title="Virtual Assistant API",
        description="Voice assistant backend: accounts and command classification",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store or AccountStore(config.storage.accounts_path)
    app.state.classifier = classifier
    app.state.uploader = uploader or MediaUploader(config.media)

    # CORS middleware (credentials needed for the session cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from virtual_assistant.server.routes_auth import router as auth_router
    from virtual_assistant.server.routes_user import router as user_router

    app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
    app.include_router(user_router, prefix="/api/user", tags=["User"])

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        classifier = app.state.classifier
        return HealthResponse(
            status="ok",
            version=__version__,
            classifier_backend=classifier.backend.name if classifier else config.classifier.backend,
            classifier_loaded=bool(classifier and classifier.backend.is_loaded()),
            accounts=len(app.state.store),
        )

    return app


def run_server(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
    workers: int = 1,
) -> None:
    """
    Run the server.

    Args:
        host: Host to bind to
        port: Port to bind to
        reload: Enable auto-reload (development)
        workers: Number of workers
    """
    import uvicorn

    config = get_config()

    uvicorn.run(
        "virtual_assistant.server.app:create_app",
        factory=True,
        host=host or config.server.host,
        port=port or config.server.port,
        reload=reload,
        workers=workers,
    )
