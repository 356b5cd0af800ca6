import logging
import os
import time
from contextlib import asynccontextmanager

import psutil
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from .api import app as api_app
from .api import init_services
from .config import MAX_DEPTH, MAX_INSPECT_SIZE, VERSION
from .services.registry import CONTAINER_BOXES

# Setup logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan"""
    logger.info("Starting ISOBMFF Inspection API...")

    init_services()
    app.state.start_time = time.time()

    logger.info(f"Upload limit {MAX_INSPECT_SIZE} bytes, nesting limit {MAX_DEPTH}")

    yield

    logger.info("Shutting down ISOBMFF Inspection API...")


app = FastAPI(
    title="ISOBMFF Inspection API",
    description="Box structure inspection for MP4 files and fragmented segments",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.mount("/api", api_app)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": "ISOBMFF Inspection API",
        "version": VERSION,
        "description": "Box tree inspection for MP4 files and segments",
        "endpoints": {
            "health": "/api/health",
            "inspect": "/api/inspect?dump=<type>&raw=<bool> (container as request body)",
            "info": "/info",
            "stats": "/stats",
            "docs": "/docs",
        },
    }


@app.get("/info")
async def get_info():
    """Traversal limits and known container boxes"""
    return {
        "max_depth": MAX_DEPTH,
        "max_inspect_size": MAX_INSPECT_SIZE,
        "container_boxes": {
            type_code.decode("latin-1"): extra for type_code, extra in CONTAINER_BOXES.items()
        },
    }


@app.get("/stats")
async def get_stats():
    """Get application statistics"""
    process = psutil.Process(os.getpid())
    memory_info = process.memory_info()

    return {
        "uptime": time.time() - getattr(app.state, "start_time", time.time()),
        "memory_usage_mb": memory_info.rss / 1024 / 1024,
        "cpu_percent": process.cpu_percent(),
        "active_tasks": getattr(api_app.state, "active_tasks", 0),
        "inspections": getattr(api_app.state, "inspections", 0),
    }

def run():
    """Run the API with uvicorn"""
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "7775"))
    workers = int(os.getenv("WORKERS", "1"))  # Note: workers > 1 requires shared state
    reload = os.getenv("RELOAD", "false").lower() == "true"

    logger.info(f"Starting server on {host}:{port}")
    logger.info(f"Workers: {workers}, Reload: {reload}")

    uvicorn.run(
        "isodump.main:app",
        host=host,
        port=port,
        workers=workers,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    run()
