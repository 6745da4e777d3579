"""Service layer for the password-gated admin surface."""

from typing import Any

from revops_maturity.core.auth import check_admin_password, create_admin_token
from revops_maturity.core.export import EXPORT_COLUMNS, render_csv
from revops_maturity.core.interfaces import IAssessmentStore
from revops_maturity.errors import UnauthorizedError
from revops_maturity.observability import get_logger
from revops_maturity.settings import Settings

logger = get_logger(__name__)


class AdminService:
    """Login, statistics, listing and export for administrators.

    Args:
        store: Assessment store.
        settings: Application settings (password, JWT and pagination limits).
    """

    def __init__(self, store: IAssessmentStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def login(self, password: str | None) -> str:
        """Exchange the admin password for a signed token.

        Raises:
            UnauthorizedError: If the password does not match.
        """
        if not check_admin_password(password, self._settings):
            logger.warning("Admin login rejected")
            raise UnauthorizedError("Invalid password")

        logger.info("Admin login succeeded")
        return create_admin_token(self._settings)

    async def get_stats(self) -> dict[str, Any]:
        """Store statistics merged with per-type event counts."""
        stats = await self._store.get_stats()
        events = await self._store.get_event_stats()
        return {**stats, "events": events}

    async def list_assessments(self, page: int | None, limit: int | None) -> dict[str, Any]:
        """One page of assessments, newest first.

        Args:
            page: 1-based page; missing or below 1 means 1.
            limit: Page size; missing or below 1 means the default, capped at
                ``admin_page_max_limit``.
        """
        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else self._settings.admin_page_default_limit
        limit = min(limit, self._settings.admin_page_max_limit)
        return await self._store.get_assessments(page, limit)

    async def export_csv(self) -> str:
        """Every assessment as semicolon-delimited CSV with a UTF-8 BOM."""
        rows = await self._store.get_all_for_export()
        logger.info("Assessments exported", row_count=len(rows))
        return render_csv(rows, EXPORT_COLUMNS)
