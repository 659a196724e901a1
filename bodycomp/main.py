"""
ISAK Body Composition Service — Main Application Entry Point
==============================================================
This is the FastAPI application factory. It:
  1. Creates the FastAPI app instance with metadata
  2. Registers the calculation router
  3. Configures CORS middleware for frontend integration
  4. Provides health check endpoints

The service is stateless: there is no database and no startup work beyond
logging configuration.

To run locally:
  uvicorn bodycomp.main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bodycomp.core.config import settings
from bodycomp.routers import calculations

# Configure logging so we can see what's happening in the console
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================
# APPLICATION LIFESPAN (Startup / Shutdown)
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    logger.info(
        f"Thresholds: body fat {settings.BODY_FAT_MIN_PERCENT}-{settings.BODY_FAT_MAX_PERCENT}%, "
        f"component sum ±{settings.COMPONENT_SUM_TOLERANCE_PERCENT}%, "
        f"age {settings.DW_MIN_AGE}-{settings.DW_MAX_AGE}"
    )

    yield  # Application is running — handle requests

    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")


# ============================================================
# CREATE THE FASTAPI APPLICATION
# ============================================================
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "ISAK 2 body-composition calculator: skinfold sums, Durnin-Womersley "
        "body density, Siri body fat, Kerr five-component fractionation, "
        "Heath-Carter somatotype and energy/macro targets."
    ),
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ============================================================
# CORS MIDDLEWARE
# ============================================================
# Allow all origins during development. In production, restrict to your frontend URL.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# REGISTER ROUTERS
# ============================================================
app.include_router(calculations.router)  # /calculations/*


# ============================================================
# ROOT / HEALTH CHECK ENDPOINT
# ============================================================
@app.get("/", tags=["Health"])
async def root():
    """Returns basic app info to confirm the API is running."""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker/Kubernetes health probes."""
    return {"status": "ok"}
