"""
Smart Translator Backend API
FastAPI application for Korean <-> English text and image translation.
"""

import logging
import os
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routers import translate, vision

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Smart Translator API",
    description="Korean <-> English translation for text and images",
    version=VERSION,
)


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    Read from the CORS_ORIGINS environment variable as a comma-separated
    list, e.g.:
        CORS_ORIGINS=https://translator.example.com,http://localhost:3000

    Defaults to ["*"] when unset. Duplicates are removed while preserving
    order.
    """
    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    if not cors_env:
        return ["*"]

    # Deduplicate while preserving order
    seen: set = set()
    origins: List[str] = []
    for origin in (o.strip() for o in cors_env.split(",")):
        if origin and origin not in seen:
            seen.add(origin)
            origins.append(origin)

    return origins


# CORS configuration: origins are resolved at startup from environment
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(translate.router, prefix="/api/translate", tags=["translate"])
app.include_router(vision.router, prefix="/api/vision", tags=["vision"])


@app.get("/")
async def root():
    return {"message": "Smart Translator API", "version": VERSION}


@app.get("/api/health")
async def health():
    """
    Report that the server is up and list its endpoints.

    Does not call the model; use GET /api/translate for a live check.
    """
    return {
        "status": "OK",
        "message": "Smart Translator API Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
        "endpoints": {
            "translate": "/api/translate",
            "vision": "/api/vision",
            "health": "/api/health",
        },
        "environment": {
            "api_key_configured": bool(os.getenv("ANTHROPIC_API_KEY")),
        },
    }
