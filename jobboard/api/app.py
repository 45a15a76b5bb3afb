"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from jobboard.agents.evaluator import build_evaluator
from jobboard.api.errors import register_exception_handlers
from jobboard.api.limiter import build_limiter
from jobboard.api.schemas import HealthResponse, ScoringStatus
from jobboard.config import Settings, get_settings
from jobboard.db.base import Database
from jobboard.services.identity import TokenService
from jobboard.services.scoring import EvaluationProvider, ScoringDispatcher, ScoringEngine

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    evaluator: EvaluationProvider | None = None,
) -> FastAPI:
    """Build the API.

    ``database`` and ``evaluator`` default to what the settings describe;
    tests pass their own.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the storage handle and scoring workers for the app's lifetime."""
        db = database or Database(settings.database_url)
        db.create_all()

        provider = evaluator if evaluator is not None else build_evaluator(settings)
        engine = ScoringEngine(provider)
        dispatcher = ScoringDispatcher(
            engine,
            db,
            deadline_seconds=settings.scoring_deadline_seconds,
            workers=settings.scoring_workers,
        )

        app.state.database = db
        app.state.scoring = engine
        app.state.dispatcher = dispatcher

        logger.info(
            f"Job Board API starting (environment={settings.environment}, "
            f"scoring={engine.status()['provider']}, rate_limits={'on' if settings.rate_limit_enabled else 'off'})"
        )
        try:
            yield
        finally:
            dispatcher.shutdown(wait=False)
            if database is None:
                db.dispose()
            logger.info("Job Board API stopped")

    app = FastAPI(
        title="Job Board API",
        description="Job postings, applications and AI-assisted screening",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.tokens = TokenService.from_settings(settings)
    app.state.limiter = build_limiter(settings)

    register_exception_handlers(app, expose_details=not settings.is_production)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Import and include routers
    from jobboard.api.routes import applications, auth, jobs

    app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
    app.include_router(jobs.router, prefix=f"{API_PREFIX}/jobs", tags=["Jobs"])
    app.include_router(applications.router, prefix=f"{API_PREFIX}/applications", tags=["Applications"])

    def scoring_engine(request: Request) -> ScoringEngine:
        return request.app.state.scoring

    @app.get("/health", response_model=HealthResponse)
    def health_check(engine: ScoringEngine = Depends(scoring_engine)):
        """Health check endpoint."""
        return HealthResponse(status="healthy", scoring=ScoringStatus(**engine.status()))

    return app
