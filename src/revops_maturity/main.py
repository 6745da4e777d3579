"""RevOps maturity assessment service entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from revops_maturity import __version__
from revops_maturity.adapters.ai_client import ClaudeEnrichmentClient
from revops_maturity.adapters.database import create_database, init_database
from revops_maturity.adapters.repositories import AssessmentStore
from revops_maturity.api.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from revops_maturity.api.results_page import results_router
from revops_maturity.api.router import router
from revops_maturity.core.benchmarks import BenchmarkEngine
from revops_maturity.core.interfaces import IEnrichmentClient
from revops_maturity.core.services import EnrichmentCoordinator
from revops_maturity.errors import register_exception_handlers
from revops_maturity.observability import configure_logging, get_logger
from revops_maturity.settings import Settings, get_settings

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    ai_client: IEnrichmentClient | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use. Defaults to the environment-backed singleton.
        ai_client: Enrichment client override. Defaults to a Claude client
            built from ``settings``.

    Returns:
        The configured application. Storage is opened in its lifespan.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open storage and wire shared components onto ``app.state``.

        A storage initialisation failure propagates and aborts startup.
        """
        database = create_database(settings.database_url, echo=settings.database_echo)
        try:
            await init_database(database)
        except Exception:
            logger.exception("Storage initialisation failed", database_url=_redact(settings.database_url))
            await database.dispose()
            raise

        store = AssessmentStore(database.session_factory)
        client = ai_client if ai_client is not None else ClaudeEnrichmentClient(
            api_key=settings.claude_api_key,
            model=settings.claude_model,
            max_tokens=settings.claude_max_tokens,
        )

        app.state.database = database
        app.state.store = store
        app.state.benchmark_engine = BenchmarkEngine(store, settings.benchmark_min_responses)
        app.state.enrichment = EnrichmentCoordinator(store, client)
        app.state.rate_limiter = FixedWindowRateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )

        logger.info(
            "Service started",
            service_name=settings.service_name,
            version=__version__,
            environment=settings.environment,
            ai_enabled=client.is_configured,
        )
        if not client.is_configured:
            logger.warning("Claude API key not set, AI enrichment disabled")

        yield

        await database.dispose()
        logger.info("Service stopped", service_name=settings.service_name)

    app = FastAPI(
        title="RevOps Maturity Assessment",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    register_exception_handlers(app)
    app.add_middleware(RateLimitMiddleware, path_prefix=router.prefix)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    app.include_router(router)
    app.include_router(results_router)

    if settings.static_dir:
        static_path = Path(settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("Static directory not found, front-end not served", static_dir=settings.static_dir)

    return app


def _redact(database_url: str) -> str:
    """Strip credentials from a database URL before logging it."""
    scheme, sep, rest = database_url.partition("://")
    if "@" not in rest:
        return database_url
    return f"{scheme}{sep}***@{rest.split('@', 1)[1]}"


app: FastAPI = create_app()
