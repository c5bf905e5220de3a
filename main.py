from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dealerdesk import __version__
from dealerdesk.config import settings
from dealerdesk.routes.dealers import router as dealers_router
from dealerdesk.routes.reports import router as reports_router
from dealerdesk.database.connection import create_tables
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="DealerDesk API",
    version=__version__,
    description="Multi-tenant dealer management with typo-tolerant dealer search"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin for origin in [
            "http://localhost:3000",
            settings.FRONTEND_URL
        ] if origin
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    try:
        create_tables()
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise


# Include routers
app.include_router(dealers_router)
app.include_router(reports_router)


@app.get("/")
def root():
    return {
        "message": "DealerDesk API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "version": __version__,
        "features": {
            "search": True,
            "fuzzy_threshold": settings.SEARCH_FUZZY_THRESHOLD,
            "candidate_cap": settings.SEARCH_CANDIDATE_CAP
        }
    }
