# FILE: backend/app.py
"""
FastAPI application entry point for Sanjeevani
Anonymous peer support, chat, journaling and mood tracking on an ephemeral store
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import Settings, get_settings
from backend.errors import SanjeevaniError, ValidationError
from backend.middleware.body_limit import BodySizeLimitMiddleware
from backend.middleware.correlation import CorrelationIdMiddleware
from backend.middleware.rate_limit import RateLimitMiddleware
from backend.routes import chat, health, journal, mood, posts, session
from backend.services.container import ServiceContainer, build_container
from backend.services.correlation import get_correlation_id
from backend.services.startup_verify import verify_startup
from backend.services.telemetry import init_telemetry

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    logger.info(f"Starting Sanjeevani backend v{VERSION}")

    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(app.state.settings)
    container: ServiceContainer = app.state.container

    verify_result = await verify_startup(container)
    if not verify_result["store_ok"]:
        await container.close()
        raise RuntimeError("Ephemeral store unreachable at startup")

    logger.info(f"Startup verification passed: mode={verify_result['mode']}")

    init_telemetry()

    yield

    logger.info("Shutting down Sanjeevani backend")
    await container.close()


def create_app(
    container: Optional[ServiceContainer] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """Build the application; tests pass a container wired with fakes"""
    settings = settings or (container.settings if container else get_settings())

    app = FastAPI(
        title="Sanjeevani API",
        description="Anonymous mental health support backend",
        version=VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.container = container

    # Last added runs outermost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware, rpm=settings.rate_limit_rpm)
    app.add_middleware(BodySizeLimitMiddleware, max_size=settings.body_size_limit_mb * 1024 * 1024)
    app.add_middleware(CorrelationIdMiddleware)

    @app.exception_handler(SanjeevaniError)
    async def sanjeevani_exception_handler(request: Request, exc: SanjeevaniError):
        if exc.status_code >= 500:
            logger.error(f"[{get_correlation_id()}] {type(exc).__name__} on {request.url.path}")
        else:
            logger.info(f"[{get_correlation_id()}] {type(exc).__name__} on {request.url.path}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        error = ValidationError(f"Invalid fields: {', '.join(fields)}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"[{get_correlation_id()}] Unhandled exception: {exc!r}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": "Something went wrong"}
        )

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(journal.router, prefix="/api/journal", tags=["journal"])
    app.include_router(mood.router, prefix="/api/mood", tags=["mood"])
    app.include_router(session.router, prefix="/api/session", tags=["session"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": "Sanjeevani",
            "version": VERSION,
            "status": "active"
        }

    return app


configure_logging(get_settings().log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "backend.app:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.environment == "development"
    )
