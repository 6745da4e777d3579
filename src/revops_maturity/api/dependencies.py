"""FastAPI dependency factories.

Long-lived collaborators (store, benchmark engine, enrichment coordinator,
rate limiter) are created once in the application lifespan and kept on
``app.state``. Services are cheap wrappers built per request, which lets
tests swap them through ``app.dependency_overrides``.
"""

from typing import Any

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from revops_maturity.core.auth import decode_admin_token
from revops_maturity.core.services import AdminService, AssessmentService
from revops_maturity.errors import UnauthorizedError
from revops_maturity.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_assessment_service(request: Request) -> AssessmentService:
    """Build AssessmentService from the application's shared components.

    Args:
        request: Incoming request, used to reach ``app.state``.

    Returns:
        Configured AssessmentService instance.
    """
    state = request.app.state
    return AssessmentService(
        store=state.store,
        benchmark_engine=state.benchmark_engine,
        enrichment=state.enrichment,
    )


def get_admin_service(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> AdminService:
    """Build AdminService from the application's store and settings."""
    return AdminService(store=request.app.state.store, settings=settings)


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    token: str | None = Query(default=None, description="Admin token, alternative to the Authorization header"),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Authorise an admin request.

    The token is read from ``Authorization: Bearer <token>`` or, failing
    that, the ``token`` query parameter (used by the CSV download link).

    Returns:
        The decoded token claims.

    Raises:
        UnauthorizedError: If no token is supplied or it does not validate.
    """
    raw_token = credentials.credentials if credentials else token
    if not raw_token:
        raise UnauthorizedError("Unauthorized")
    return decode_admin_token(raw_token, settings)
