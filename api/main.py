"""FastAPI application for PromptPulse."""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the scheduler on startup and stop it on shutdown."""
    logger.info("Starting PromptPulse API...")

    from db.database import init_db

    init_db()

    if os.getenv("SCHEDULER_ENABLED", "true").lower() == "true":
        from scheduler.scheduler import init_scheduler

        scheduler = init_scheduler(auto_register=True)
        if scheduler.is_available and scheduler.start():
            logger.info("Scheduler started successfully")
        else:
            logger.warning("Could not start scheduler")

    yield

    logger.info("Shutting down PromptPulse API...")

    from scheduler.scheduler import get_scheduler

    scheduler = get_scheduler()
    if scheduler.is_running:
        scheduler.shutdown(wait=False)


app = FastAPI(
    title="PromptPulse API",
    description="Trending visual styles from social media, turned into AI image and video prompts",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "PromptPulse API",
        "version": VERSION,
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "clusters": "/api/clusters",
            "trending": "/api/clusters/trending",
            "prompts": "/api/prompts",
            "admin": "/api/admin/clusters/pending",
            "scheduler": "/api/scheduler/status",
        },
    }


from api.routes.admin import router as admin_router
from api.routes.clusters import router as clusters_router
from api.routes.prompts import router as prompts_router
from api.routes.scheduler import router as scheduler_router

app.include_router(clusters_router, prefix="/api", tags=["Clusters"])
app.include_router(prompts_router, prefix="/api", tags=["Prompts"])
app.include_router(admin_router, prefix="/api", tags=["Admin"])
app.include_router(scheduler_router, prefix="/api", tags=["Scheduler"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
