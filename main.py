"""
Window Configurator: Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime, timezone

from config import settings, configure_logging

configure_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Load the catalog and report the extraction setup
    Shutdown: Nothing to release
    """
    from services.session_service import get_configurator_session

    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        catalog_backend=settings.catalog_backend
    )

    session = get_configurator_session()
    logger.info(
        "catalog_ready",
        categories=len(session.store),
        options=sum(len(c.options) for c in session.catalog())
    )

    if not settings.extraction_configured:
        logger.warning("extraction_not_configured", hint="Set ANTHROPIC_API_KEY to enable PDF import")

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Window Configurator",
    description="Step-by-step window quotes with AI-assisted supplier catalog import",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status, catalog backend and extraction availability
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "catalog_backend": settings.catalog_backend,
        "extraction": "configured" if settings.extraction_configured else "not_configured"
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Window Configurator API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "quote": "/api/quote",
            "catalog": "/api/catalog",
            "catalog_import": "/api/catalog/import",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.quote import router as quote_router
from routes.catalog import router as catalog_router

app.include_router(quote_router)  # Prefix already in router
app.include_router(catalog_router)  # Prefix already in router


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
