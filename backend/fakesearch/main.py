"""
Fake Search Engine — FastAPI Backend
Sponsored ads keyed by search keyword, organic results via a search API proxy,
and AI-assisted ad copy. All ads persisted to PostgreSQL.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fakesearch.config import APP_NAME, get_settings
from fakesearch.database import init_db, check_db_connection
from fakesearch.routers import ads, search, meta

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {APP_NAME}...")
    try:
        await init_db()
        logger.info("Database initialized — ads table ready.")
    except Exception as e:
        logger.error(f"Startup failed (DB/init): {e}", exc_info=True)
        # Still yield so app can serve /api/health (degraded) and logs are visible
    if not settings.search_configured:
        logger.warning("GOOGLE_API_KEY/GOOGLE_SEARCH_ENGINE_ID not set; serving localized demo results")
    if not settings.ai_configured:
        logger.warning("No LLM API key set; ad copy generation will use templates")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title=APP_NAME,
    description="Demo search results page backend: sponsored ads, organic results and AI ad copy",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Register Routers (admin console is unauthenticated) ──────────────
app.include_router(ads.router, prefix="/api/ads", tags=["Ads"])
app.include_router(search.router, prefix="/api/search", tags=["Search"])
app.include_router(meta.router, prefix="/api", tags=["Meta"])


@app.get("/api/health")
async def health_check():
    db_ok = await check_db_connection()
    return {
        "status": "healthy" if db_ok else "degraded",
        "service": APP_NAME,
        "database": "connected" if db_ok else "disconnected",
    }
