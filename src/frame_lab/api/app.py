"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from frame_lab.api.auth import router as auth_router
from frame_lab.api.studio import router as studio_router
from frame_lab.app_logging import configure_logging
from frame_lab.containers import AppContainer
from frame_lab.domain.errors import (
    AuthenticationError,
    FrameLabError,
    InactiveAccountError,
    MissingApiKeyError,
    QuotaExceededError,
)
from frame_lab.services.auth import describe_auth_error


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        await state_container.api_key_service.provision()
        try:
            state_container.session_guard.check_initial_session()
        except Exception:
            logger.exception("Failed to check the persisted session")
        state_container.session_guard.attach()
        state_container.session_monitor.start()
        yield
        await state_container.session_monitor.stop()
        state_container.session_guard.detach()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(studio_router)

    @app.exception_handler(AuthenticationError)
    async def authentication_error(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        status_code = (
            status.HTTP_403_FORBIDDEN
            if isinstance(exc, InactiveAccountError)
            else status.HTTP_401_UNAUTHORIZED
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": describe_auth_error(str(exc))},
        )

    @app.exception_handler(QuotaExceededError)
    async def quota_exceeded(request: Request, exc: QuotaExceededError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": str(exc)},
        )

    @app.exception_handler(MissingApiKeyError)
    async def missing_api_key(request: Request, exc: MissingApiKeyError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(FrameLabError)
    async def provider_error(request: Request, exc: FrameLabError) -> JSONResponse:
        logger.warning("Request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
