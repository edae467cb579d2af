"""Authentication, session and settings endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from frame_lab.api.models import (
    ApiKeyRequest,
    ApiKeyStatus,
    ApiKeyValidation,
    CredentialsRequest,
    MessageResponse,
    SessionStatus,
)

if TYPE_CHECKING:
    from frame_lab.containers import AppContainer

router = APIRouter(tags=["auth"])


async def require_session(request: Request) -> None:
    """Reject requests while this client is not authenticated."""
    container: AppContainer = request.app.state.container
    if not container.session_guard.context.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def session_status(container: AppContainer) -> SessionStatus:
    """Describe the current authentication state."""
    context = container.session_guard.context
    return SessionStatus(
        authenticated=context.is_authenticated,
        email=context.user.email if context.user else None,
        loading=context.loading,
    )


@router.get("/session")
async def get_session(request: Request) -> SessionStatus:
    """Return the current authentication state."""
    return session_status(request.app.state.container)


@router.post("/auth/login")
async def login(body: CredentialsRequest, request: Request) -> SessionStatus:
    """Sign in and take over the account's active session."""
    container: AppContainer = request.app.state.container
    container.auth_service.login(body.email, body.password)
    return session_status(container)


@router.post("/auth/register")
async def register(body: CredentialsRequest, request: Request) -> MessageResponse:
    """Create an account awaiting activation."""
    container: AppContainer = request.app.state.container
    return MessageResponse(
        message=container.auth_service.register(body.email, body.password)
    )


@router.post("/auth/logout")
async def logout(request: Request) -> SessionStatus:
    """Sign out and release this client's session."""
    container: AppContainer = request.app.state.container
    container.auth_service.logout()
    return session_status(container)


@router.post("/auth/verify")
async def verify(request: Request) -> SessionStatus:
    """Check that this client still holds the account's active session."""
    container: AppContainer = request.app.state.container
    container.session_guard.verify_session()
    return session_status(container)


@router.get("/settings/api-key", dependencies=[Depends(require_session)])
async def api_key_status(request: Request) -> ApiKeyStatus:
    """Report whether an API key is stored."""
    container: AppContainer = request.app.state.container
    return ApiKeyStatus(is_set=container.api_key_service.is_set)


@router.put("/settings/api-key", dependencies=[Depends(require_session)])
async def save_api_key(body: ApiKeyRequest, request: Request) -> ApiKeyStatus:
    """Store or clear the API key."""
    container: AppContainer = request.app.state.container
    container.api_key_service.set_api_key(body.api_key)
    return ApiKeyStatus(is_set=container.api_key_service.is_set)


@router.post("/settings/api-key/validate", dependencies=[Depends(require_session)])
async def validate_api_key(body: ApiKeyRequest, request: Request) -> ApiKeyValidation:
    """Test an API key against the provider."""
    container: AppContainer = request.app.state.container
    return ApiKeyValidation(valid=await container.api_key_service.validate(body.api_key))
