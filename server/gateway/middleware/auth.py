"""
Authentication middleware.

The gateway sits behind an authenticating proxy that forwards the caller's
identity in request headers:

1. X-User-Id: the authenticated principal (required)
2. X-User-Role: the principal's role; "ADMIN" grants admin scope

These headers are trusted as-is. The proxy must strip or overwrite any
X-User-Id / X-User-Role values sent by clients, and the gateway must not
be reachable except through it.
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from gateway.models.auth import AuthUser

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware for attaching the forwarded caller identity to the request."""

    def __init__(self, app: FastAPI, exclude_paths: Optional[list[str]] = None) -> None:
        """
        Initialize authentication middleware.

        Args:
            app: FastAPI application
            exclude_paths: List of paths to exclude from authentication
        """
        super().__init__(app)

        # Default paths that don't require authentication
        self.exclude_paths = exclude_paths or [
            "/",
            "/health",
            "/docs",
            "/openapi.json",
            "/redoc",
        ]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through authentication middleware.

        Args:
            request: Incoming request
            call_next: Next middleware/handler in chain

        Returns:
            Response from next handler
        """

        # Skip authentication for CORS preflight requests (OPTIONS)
        if request.method == "OPTIONS":
            return await call_next(request)  # type: ignore[no-any-return]

        # Skip authentication for excluded paths
        if self._should_skip_auth(request):
            return await call_next(request)  # type: ignore[no-any-return]

        user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
        if user_id:
            role = (request.headers.get(USER_ROLE_HEADER) or "USER").strip() or "USER"
            request.state.auth_type = "user"
            request.state.user = AuthUser(id=user_id, role=role)
            return await call_next(request)  # type: ignore[no-any-return]

        # No valid authentication found
        logger.debug("Rejected unauthenticated request to %s", request.url.path)
        return JSONResponse(
            status_code=401,
            content={"detail": "Authentication required."},
        )

    def _should_skip_auth(self, request: Request) -> bool:
        """
        Check if request path should skip authentication.

        Args:
            request: Incoming request

        Returns:
            True if authentication should be skipped
        """
        path = request.url.path

        # Check exact matches
        if path in self.exclude_paths:
            return True

        # Check if path starts with any excluded prefix (but not root path)
        for exclude_path in self.exclude_paths:
            # Skip prefix matching for root path to avoid matching everything
            if exclude_path == "/":
                continue
            if path.startswith(exclude_path):
                return True

        return False


def get_current_user(request: Request) -> AuthUser:
    """
    Get current authenticated user from request state.

    Args:
        request: Current request

    Returns:
        AuthUser NamedTuple

    Raises:
        HTTPException: If no user is authenticated
    """
    if not hasattr(request.state, "auth_type") or request.state.auth_type != "user":
        raise HTTPException(status_code=401, detail="User authentication required")

    return request.state.user  # type: ignore[no-any-return]
