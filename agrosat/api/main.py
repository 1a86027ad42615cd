from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
from sqlalchemy import text
import logging
import time

from agrosat import __version__
from agrosat.api.core.database import engine
from agrosat.api.core.cache import CacheService, create_redis_client
from agrosat.api.core.auth_provider import SupabaseAuthClient
from agrosat.api.core.llm import build_llm_client
from agrosat.api.config import settings
from agrosat.analysis.orchestrator import build_orchestrator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("Starting AgroSat API...")

    app.state.llm_client = build_llm_client(settings)
    logger.info(f"LLM provider: {app.state.llm_client.provider}")

    app.state.cache = CacheService(create_redis_client(settings)) if settings.CACHE_ENABLED else None
    app.state.orchestrator = build_orchestrator(settings, app.state.llm_client, app.state.cache)
    app.state.auth_client = SupabaseAuthClient.from_settings(settings)

    if not settings.imagery_configured:
        logger.warning("Copernicus credentials missing; analyses will use synthetic estimates")

    # Test database connection
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("✅ Database connected")
    except Exception as e:
        # Start anyway; /api/health reports the problem
        logger.error(f"❌ Database connection failed: {e}")

    # Test Redis connection
    if app.state.cache is not None:
        try:
            await app.state.cache.ping()
            logger.info("✅ Redis connected")
        except Exception as e:
            logger.error(f"❌ Redis connection failed: {e}")

    yield

    # Shutdown
    logger.info("Shutting down AgroSat API...")
    if app.state.cache is not None:
        try:
            await app.state.cache.close()
        except Exception as e:
            logger.warning(f"Error closing Redis client: {e}")
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Field monitoring API: satellite imagery, weather and AI crop-health analysis",
    version=__version__,
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip compression for responses
app.add_middleware(GZipMiddleware, minimum_size=1000)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {process_time:.3f}s")
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": "Invalid request",
            "detail": jsonable_encoder(exc.errors()),
            "success": False
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": message,
            "detail": jsonable_encoder(exc.detail),
            "success": False
        },
        headers=getattr(exc, "headers", None)
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An error occurred",
            "success": False
        }
    )


# Import routers
from agrosat.api.routers import health, auth, user, fields, activity, analysis, chat

API_PREFIX = settings.API_PREFIX

# Include routers
app.include_router(
    health.router,
    prefix=API_PREFIX,
    tags=["System"]
)
app.include_router(
    auth.router,
    prefix=f"{API_PREFIX}/auth",
    tags=["Authentication"]
)
app.include_router(
    user.router,
    prefix=f"{API_PREFIX}/user",
    tags=["Users"]
)
app.include_router(
    fields.router,
    prefix=f"{API_PREFIX}/fields",
    tags=["Fields"]
)
app.include_router(
    activity.router,
    prefix=f"{API_PREFIX}/activity",
    tags=["Activity"]
)
app.include_router(
    analysis.router,
    prefix=API_PREFIX,
    tags=["Analysis"]
)
app.include_router(
    chat.router,
    prefix=f"{API_PREFIX}/chat",
    tags=["Assistant"]
)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "docs": f"{API_PREFIX}/docs",
        "version": __version__,
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "auth": f"{API_PREFIX}/auth",
            "fields": f"{API_PREFIX}/fields",
            "activity": f"{API_PREFIX}/activity",
            "analyze": f"{API_PREFIX}/analyze",
            "chat": f"{API_PREFIX}/chat"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "agrosat.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
