from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fixer.config import settings
from fixer.diagnosis.llm import AnthropicReasoner
from fixer.failures.router import router as failures_router
from fixer.middleware.error_handler import ErrorHandlerMiddleware
from fixer.middleware.logging import RequestLoggingMiddleware
from fixer.projects.router import router as projects_router
from fixer.webhooks.router import router as webhooks_router

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.ANTHROPIC_API_KEY:
        logger.warning("anthropic_api_key_missing")
    app.state.reasoner = AnthropicReasoner.from_settings(settings)
    yield
    await app.state.reasoner.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Inngest Failure Fixer",
        version="0.1.0",
        docs_url="/docs",
        lifespan=lifespan,
    )

    cors_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(webhooks_router, prefix="/api/v1")
    app.include_router(failures_router, prefix="/api/v1")
    app.include_router(projects_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
