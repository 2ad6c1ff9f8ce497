"""
S-Net Triage FastAPI Application Entry Point

Application initialization with:
- Lifespan management (runtime wiring, shutdown)
- CORS configuration
- Error handling middleware
- Router registration
- Prometheus metrics endpoint
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from snet_triage import __version__
from snet_triage.api.middleware.error_handler import ErrorHandlerMiddleware
from snet_triage.api.runtime import TriageRuntime, build_runtime
from snet_triage.api.v1.router import api_router
from snet_triage.config import get_settings
from snet_triage.config.logging_config import configure_logging, get_logger
from snet_triage.infrastructure.metrics import metrics_router, update_system_info
from snet_triage.infrastructure.monitoring import init_sentry

settings = get_settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Builds the triage runtime unless one was injected, and tears it
    down on shutdown (pending paced messages are cancelled).
    """
    logger.info(
        "Starting S-Net triage service",
        env=settings.env,
        version=__version__,
    )

    init_sentry(
        dsn=settings.sentry.dsn,
        environment=settings.env,
        release=f"snet-triage@{__version__}",
        traces_sample_rate=settings.sentry.traces_sample_rate,
    )
    update_system_info(settings.env, __version__)

    if getattr(app.state, "runtime", None) is None:
        app.state.runtime = await build_runtime(settings)

    try:
        yield
    finally:
        logger.info("Shutting down S-Net triage service")
        await app.state.runtime.shutdown()
        logger.info("S-Net triage service shutdown complete")


def create_application(runtime: Optional[TriageRuntime] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        runtime: Pre-built runtime (tests); built during startup otherwise
    """
    app = FastAPI(
        title="S-Net Triage API",
        description="Automated pre-counselor triage and escalation for student counseling",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(
        api_router,
        prefix=f"/api/{settings.api_version}",
    )
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": "S-Net Triage API",
            "version": __version__,
            "status": "operational",
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "snet_triage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
