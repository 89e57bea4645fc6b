from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.api.v1.auth.register import user_register_router
from app.core.config import settings
from app.core import custom_logging
from app.core.custom_logging import configure_logging
from app.core.custom_logging import logger
from app.core.errors import DatabaseUnavailableError
from app.core.errors import unexpected_error_handler
from app.db.session import db_health

configure_logging(log_level=settings.LOG_LEVEL)


def configure_cors(a: FastAPI) -> None:
    if not settings.CORS_ORIGINS:
        return
    a.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_routers(a: FastAPI) -> None:
    a.include_router(user_register_router, tags=["Users"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Asynchronous context manager for FastAPI lifespan events (startup, shutdown).
    """
    alog = custom_logging.async_logger
    try:
        if alog:
            await alog.info("Startup application...")
        else:
            logger.info("Startup application...")

        await db_health.ensure_initialized()

        yield

    finally:
        await db_health.dispose()
        if alog:
            await alog.info("Shutdown application...")
            alog.shutdown()
        else:
            logger.info("Shutdown application...")


def create_app() -> FastAPI:
    logger.info(f"Starting {settings.PROJECT_NAME}")
    application = FastAPI(
        title=settings.PROJECT_NAME,
        summary="Account registration service for users and coaches",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    configure_cors(application)
    setup_routers(application)
    application.add_exception_handler(DatabaseUnavailableError, unexpected_error_handler)
    application.add_exception_handler(Exception, unexpected_error_handler)

    @application.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return application


app = create_app()
