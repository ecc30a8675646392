from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager
from pathlib import Path
import structlog
import time

from app.core.config import Settings, settings as default_settings
from app.core.database import Database
from app.core.log import configure_logging
from app.api import analytics, auth, dashboards, datasources
from app.middleware.rate_limit import RedisTokenBucket, rate_limit_middleware
from app.middleware.security_headers import security_headers_middleware

configure_logging()

logger = structlog.get_logger()


def _format_validation_errors(exc: RequestValidationError) -> list[str]:
    """Flatten pydantic errors into 'field message' strings"""
    messages = []
    for error in exc.errors():
        # Drop the 'body'/'query' prefix
        loc = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(loc) or "request"
        messages.append(f"{field}: {error.get('msg', 'is invalid')}")
    return messages


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the API application

    Args:
        settings: configuration; the environment-derived settings by default
        database: pre-built store to use instead of one created at startup
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle events"""
        owns_database = app.state.database is None
        if owns_database:
            app.state.database = Database(settings.database_url, echo=settings.debug)
        if settings.auto_create_tables:
            await app.state.database.create_all()

        logger.info("application_startup", app_name=settings.app_name)
        yield

        if owns_database:
            await app.state.database.dispose()
            app.state.database = None
        logger.info("application_shutdown")

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = database
    app.state.rate_limiter = None
    if settings.rate_limit_enabled:
        app.state.rate_limiter = RedisTokenBucket(
            rate=settings.rate_limit_requests,
            period=settings.rate_limit_period,
            redis_url=settings.redis_url
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(security_headers_middleware)

    # Middleware for logging requests
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )

        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = _format_validation_errors(exc)
        logger.info("request_validation_failed", path=request.url.path, errors=errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Validation failed", "errors": errors}
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    # Include routers
    for module in (auth, analytics, dashboards, datasources):
        app.include_router(module.router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "app": settings.app_name, "version": settings.version}

    _mount_frontend(app, Path(settings.static_dir))

    return app


def _mount_frontend(app: FastAPI, static_dir: Path):
    """Serve a built frontend, falling back to index.html for client-side routes"""
    if not static_dir.is_dir():
        return

    index = static_dir / "index.html"
    # First path segment of every API route; unknown paths under these stay JSON 404s
    api_segments = {
        route.path.strip("/").split("/")[0]
        for route in app.routes
        if isinstance(route, APIRoute)
    }

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa_fallback(full_path: str):
        if full_path.split("/")[0] in api_segments:
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Not Found"})

        candidate = (static_dir / full_path).resolve()
        if full_path and candidate.is_file() and static_dir.resolve() in candidate.parents:
            return FileResponse(candidate)
        if index.is_file():
            return FileResponse(index)
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Not Found"})

    logger.info("frontend_mounted", static_dir=str(static_dir))


app = create_app()
