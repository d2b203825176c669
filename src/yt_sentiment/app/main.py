# src/yt_sentiment/app/main.py
"""
FastAPI Main Application
YouTube Comment Sentiment Analysis
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from yt_sentiment import __version__
from yt_sentiment.api.routers import analysis_router
from yt_sentiment.app.config import get_config, validate_config, setup_logging
from yt_sentiment.app.shared_cache import get_result_cache
from yt_sentiment.services import ServiceError, error_to_http_status

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle Management
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    # ========== STARTUP ==========
    logger.info("🚀 Starting YouTube Comment Sentiment Analysis...")

    # 1. Load and validate configuration
    logger.info("⚙️  Loading configuration...")
    config = get_config()
    setup_logging(config)

    validation_result = validate_config(config)
    if not validation_result["valid"]:
        logger.error("❌ Configuration validation failed!")
        for error in validation_result["errors"]:
            logger.error(f"  - {error}")
        raise RuntimeError("Invalid configuration")

    if validation_result["warnings"]:
        for warning in validation_result["warnings"]:
            logger.warning(f"  ⚠️  {warning}")

    logger.info("✅ Configuration loaded and validated")

    # 2. Initialize result cache
    logger.info("📦 Initializing result cache...")
    cache = get_result_cache(config.cache.analysis_ttl_seconds)
    logger.info(f"✅ Result cache ready (TTL {cache.ttl_seconds}s)")

    # 3. Print startup summary
    _print_startup_summary(config)

    logger.info("✅ Application startup complete!\n")

    yield

    # ========== SHUTDOWN ==========
    logger.info("\n🛑 Shutting down application...")

    logger.info("🧹 Clearing result cache...")
    cache.clear()

    logger.info("✅ Application shutdown complete")


def _print_startup_summary(config) -> None:
    """Print startup summary"""
    summary = f"""
╔══════════════════════════════════════════════════════════════════════╗
║          YouTube Comment Sentiment Analysis                          ║
║                      Status: Ready 🚀                                ║
╚══════════════════════════════════════════════════════════════════════╝

📋 Configuration:
   • API Host: {config.api.host}:{config.api.port}
   • Debug Mode: {config.api.debug}
   • Result Cache TTL: {config.cache.analysis_ttl_seconds}s
   • Gemini Model: {config.gemini.model}

🔑 API Keys:
   • YouTube: {'✅' if config.youtube_api.api_key else '❌'}
   • Gemini: {'✅' if config.gemini.api_key else '❌'}

🔌 Endpoints:
   • API Docs: http://{config.api.host}:{config.api.port}/docs
   • Video Analysis: POST {config.api.prefix}/analysis/video
   • Channel Analysis: POST {config.api.prefix}/analysis/channel
   • Comment Explorer: POST {config.api.prefix}/analysis/comments

╔══════════════════════════════════════════════════════════════════════╗
║  Press Ctrl+C to stop the server                                     ║
╚══════════════════════════════════════════════════════════════════════╝
    """
    print(summary)


# ============================================================================
# FastAPI Application Instance
# ============================================================================


def create_app() -> FastAPI:
    """
    FastAPI application factory
    Creates and configures the FastAPI application
    """
    config = get_config()

    app = FastAPI(
        title="YouTube Comment Sentiment Analysis",
        description="Sentiment analysis of YouTube video and channel comments",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=config.api.debug,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    _register_exception_handlers(app)

    # Register routers
    _register_routers(app, config)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        logger.error(f"HTTP error: {exc.status_code} - {exc.detail}")
        if isinstance(exc.detail, dict):
            # Service errors already carry {error, message, details}
            return JSONResponse(status_code=exc.status_code, content=exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status_code": exc.status_code,
                "path": str(request.url),
            },
        )

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        """Handle service errors raised outside the routers"""
        status_code = error_to_http_status(exc)
        logger.error(f"Service error: {status_code} - {exc}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Handle validation errors"""
        logger.error(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation Error",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": str(exc),
                "path": str(request.url),
            },
        )


def _register_routers(app: FastAPI, config) -> None:
    """Register API routers"""
    app.include_router(analysis_router)

    # Health check endpoint
    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": __version__,
            "youtube_api_key_set": bool(config.youtube_api.api_key),
            "gemini_api_key_set": bool(config.gemini.api_key),
        }

    # Root endpoint
    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "YouTube Comment Sentiment Analysis API",
            "version": __version__,
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/health",
        }

    # System info endpoint
    @app.get("/system/info", tags=["System"])
    async def system_info():
        """Get system information"""
        return {
            "config": config.get_summary(),
            "cache_stats": get_result_cache().get_stats(),
        }

    logger.info("✅ API routers registered")


# ============================================================================
# Application Instance
# ============================================================================

app = create_app()


# ============================================================================
# Development Server Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    config = get_config()

    uvicorn.run(
        "yt_sentiment.app.main:app",
        host=config.api.host,
        port=config.api.port,
        reload=config.api.debug,
        log_level=config.logging.level.lower(),
    )
