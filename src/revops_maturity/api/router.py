"""Top-level API router.

Every /api route shares the per-IP rate limit applied by
``RateLimitMiddleware``. The share page and the health check live outside it.

API prefix: /api
"""

from fastapi import APIRouter

from revops_maturity.api.routes import admin, assessment

router = APIRouter(prefix="/api")

router.include_router(assessment.router)
router.include_router(admin.router)
