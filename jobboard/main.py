"""
Job Board API - Main Application

FastAPI backend with:
- MongoDB for every record (accounts, jobs, candidates, profiles, templates)
- SMTP for verification codes and candidate notifications
- Local disk for uploaded pictures, resumes and logos (served under /uploads)

Run: uvicorn jobboard.main:app --reload --port 5000
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError

from jobboard.api.routes import api_router
from jobboard.db.mongodb import init_mongo_indexes, test_mongo_connection
from jobboard.core.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Board API",
    description="""
    Job board backend for organizations and job seekers.

    ## Features
    - **Organizations**: Registration with email verification, login, password reset
    - **Users**: Registration with one-time code, login, password reset
    - **Jobs**: Post, list and update job openings
    - **Candidates**: Apply with picture and resume, track and update applications
    - **Profiles**: Public company profiles with logo
    - **Templates**: Email templates with {placeholder} tokens sent to candidates
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Serve uploaded files
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except PyMongoError as e:
        logger.warning(f"MongoDB index initialization failed: {e}")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
