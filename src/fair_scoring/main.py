"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.router import router as v1_router
from .config import get_settings
from .scoring.rubric import SCORE_SHEET, VALID_CATEGORIES
from .utils.logging import get_logger, setup_logging

settings = get_settings()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging(settings.log_level, show_sql=settings.debug)
    logger.info("Starting %s", settings.app_name)
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(
    title="fair_scoring",
    description="Science-fair judging, ranking and promotion service",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(v1_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/api-info")
async def api_info():
    """API information endpoint: routes, score sheet and competition rules."""
    return {
        "name": "fair_scoring",
        "description": "Science-fair judging, ranking and promotion service",
        "version": "0.1.0",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json",
        "api_prefix": "/api/v1",
        "endpoints": {
            "users": "/api/v1/users",
            "projects": "/api/v1/projects",
            "assignments": "/api/v1/assignments",
            "rankings": "/api/v1/rankings",
            "arbitration": "/api/v1/arbitration",
            "promotion": "/api/v1/promotion",
        },
        "categories": VALID_CATEGORIES,
        "score_sheet": {
            section.value: {
                "title": sheet.title,
                "max_score": str(sheet.total_max_score),
                "criteria": len(sheet.criteria),
            }
            for section, sheet in SCORE_SHEET.items()
        },
        "rules": {
            "variance_threshold": str(settings.variance_threshold),
            "promotion_slots": settings.promotion_slots,
            "rank_points": settings.rank_points,
            "levels": ["Sub-County", "County", "Regional", "National"],
            "note": "A coordinator's score replaces the other judges' score for its section.",
        },
    }
