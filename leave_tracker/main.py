import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pymongo.errors import PyMongoError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from leave_tracker.api.v1.endpoints.auth import router as auth_router
from leave_tracker.api.v1.endpoints.dashboard import router as dashboard_router
from leave_tracker.api.v1.endpoints.employees import router as employees_router
from leave_tracker.api.v1.endpoints.leaves import router as leaves_router
from leave_tracker.api.v1.endpoints.stats import router as stats_router
from leave_tracker.core.config import Settings, settings as default_settings
from leave_tracker.core.database import DocumentStoreManager
from leave_tracker.core.exceptions import InternalError, LeaveTrackerError
from leave_tracker.core.ratelimit import limiter

logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStoreManager] = None,
) -> FastAPI:
    """Build the application around an explicitly owned document store."""
    settings = settings or default_settings
    store = store or DocumentStoreManager(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Async context manager for app lifespan events"""
        logger.info("🚀 Starting leave tracker...")
        try:
            yield
        finally:
            logger.info("🔌 Closing document store...")
            try:
                await store.close()
            except Exception as e:
                logger.error(f"⚠️ Error during shutdown: {str(e)}")
            logger.info("👋 Application shutdown complete")

    app = FastAPI(
        title="Leave Tracker API",
        description="Leave requests for employees, approvals for administrators",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.document_store = store
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Request: {request.method} {request.url}")
        response = await call_next(request)
        response.headers["X-Storage-Mode"] = "ephemeral" if store.is_ephemeral else store.mode.value
        logger.info(f"Response status: {response.status_code}")
        return response

    @app.middleware("http")
    async def answer_preflight(request: Request, call_next):
        # Every path accepts OPTIONS with an empty 200.
        if request.method == "OPTIONS":
            return Response(status_code=200, headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, POST, PATCH, DELETE, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type, Authorization",
            })
        return await call_next(request)

    @app.exception_handler(LeaveTrackerError)
    async def leave_tracker_exception_handler(request: Request, exc: LeaveTrackerError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(PyMongoError)
    async def document_store_exception_handler(request: Request, exc: PyMongoError):
        logger.error(f"Document store error on {request.method} {request.url.path}: {exc}")
        error = InternalError(f"Database error: {exc}")
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation Error: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})

    @app.get("/", tags=["Health Check"])
    async def health_check():
        try:
            await store.init()
            return {
                "status": "healthy",
                "service": "Leave Tracker API",
                "database": store.mode.value,
                "ephemeral": store.is_ephemeral,
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return {
                "status": "unhealthy",
                "service": "Leave Tracker API",
                "database": "disconnected",
                "error": str(e),
            }

    app.include_router(auth_router, prefix=API_PREFIX, tags=["Authentication"])
    app.include_router(employees_router, prefix=API_PREFIX, tags=["Employees"])
    app.include_router(leaves_router, prefix=API_PREFIX, tags=["Leaves"])
    app.include_router(stats_router, prefix=API_PREFIX, tags=["Statistics"])
    app.include_router(dashboard_router, prefix=API_PREFIX, tags=["Dashboard"])

    logger.info(f"✅ Loaded {len(app.routes)} routes")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("leave_tracker.main:app", host="0.0.0.0", port=8000)
