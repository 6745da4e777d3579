"""FastAPI router for the password-gated admin surface.

API prefix: /api/admin
Auth: ``POST /login`` is open; every other route needs an admin JWT as a
bearer token or ``?token=`` query parameter.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from revops_maturity.api.dependencies import get_admin_service, require_admin
from revops_maturity.api.schemas.assessment import LoginRequest, TokenResponse
from revops_maturity.core.services import AdminService

EXPORT_FILENAME: str = "revops-assessments.csv"

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login", response_model=TokenResponse, summary="Exchange the admin password for a token")
async def login(
    body: LoginRequest,
    service: AdminService = Depends(get_admin_service),
) -> TokenResponse:
    """Return a 24-hour admin token, or 401 for a wrong password."""
    return TokenResponse(token=service.login(body.password))


@router.get(
    "/stats",
    summary="Dashboard statistics",
    dependencies=[Depends(require_admin)],
)
async def get_stats(
    service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    """Totals, averages, level distribution, recent leads, weekly trend and event counts."""
    return await service.get_stats()


@router.get(
    "/assessments",
    summary="Paginated assessment list",
    dependencies=[Depends(require_admin)],
)
async def list_assessments(
    page: int | None = Query(default=None, description="1-based page number"),
    limit: int | None = Query(default=None, description="Page size, capped at 100"),
    service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    """Newest-first page of assessments with total and page count."""
    return await service.list_assessments(page, limit)


@router.get(
    "/export",
    summary="Download every assessment as CSV",
    dependencies=[Depends(require_admin)],
    response_class=Response,
)
async def export_assessments(
    service: AdminService = Depends(get_admin_service),
) -> Response:
    """Semicolon-delimited CSV with a UTF-8 BOM, served as an attachment."""
    content = await service.export_csv()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )
