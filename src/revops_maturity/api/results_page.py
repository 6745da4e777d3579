"""Server-rendered share page for a single assessment.

``GET /results/{id}`` renders a small HTML document whose Open Graph tags
carry the overall score and maturity level, so links shared on social
platforms unfurl with the result. Browsers are handed on to the front-end.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateNotFound

from revops_maturity.api.dependencies import get_app_settings, get_assessment_service
from revops_maturity.core.services import AssessmentService
from revops_maturity.errors import NotFoundError
from revops_maturity.observability import get_logger
from revops_maturity.settings import Settings

logger = get_logger(__name__)

TEMPLATES_DIR: Path = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

results_router = APIRouter(tags=["Share page"])


def og_title(overall: float) -> str:
    """Open Graph title for a result page."""
    return f"RevOps Maturity: {overall}/5.0"


def og_description(level_name: str) -> str:
    """Open Graph description for a result page."""
    return f"{level_name} – organisation RevOps maturity assessment"


@results_router.get("/results/{assessment_id}", include_in_schema=False)
async def results_page(
    request: Request,
    assessment_id: str,
    service: AssessmentService = Depends(get_assessment_service),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Render the share page, or redirect to ``/`` if it cannot be rendered."""
    try:
        result = await service.get_assessment(assessment_id)
    except NotFoundError:
        return RedirectResponse(url="/", status_code=302)

    overall = result["scores"]["overall"]
    try:
        return templates.TemplateResponse(
            request,
            settings.results_template,
            {
                "assessment_id": assessment_id,
                "og_title": og_title(overall),
                "og_description": og_description(result["maturity_level"]),
                "scores": result["scores"],
                "level": result["level"],
                "share_url": result["share_url"],
            },
        )
    except TemplateNotFound:
        logger.warning("Results template missing", template=settings.results_template)
        return RedirectResponse(url="/", status_code=302)
