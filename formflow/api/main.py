"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from formflow import __version__
from formflow.api.dependencies import get_config, get_storage
from formflow.api.wizard_router import api as wizard_api
from formflow.error_handler import ErrorHandler

# Setup logging
logging.basicConfig(level=getattr(logging, get_config().logging.level))
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="formflow API",
    description="Stepped form sessions with validation gates, draft resume and submission",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

error_handler = ErrorHandler()

app.include_router(wizard_api, prefix="/api/v1")


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    payload = error_handler.handle_exception(exc, context={"path": request.url.path})
    return JSONResponse(status_code=500, content=payload)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check (draft storage)."""
    return {"status": "healthy", "storage": get_storage().ping(), "timestamp": datetime.now().isoformat()}
