"""
DevEvent - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from devevent.core.config import settings
from devevent.core.connection import ConnectionManager, get_connection_manager
from devevent.core.errors import DomainError
from devevent.api import routes_admin, routes_public
from devevent.utils.responses import domain_error_handler

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(connections: Optional[ConnectionManager] = None) -> FastAPI:
    """Build the application around one lifetime-scoped connection manager"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        app.state.connections = connections or get_connection_manager()
        logger.info("Application startup")
        yield
        await app.state.connections.close()
        logger.info("Application shutdown")

    app = FastAPI(
        title="DevEvent",
        description="Event listings and bookings for developer events",
        version="1.0.0",
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)

    # Include routers
    app.include_router(routes_public.router, tags=["public"])
    app.include_router(routes_admin.router, prefix="/api", tags=["admin"])

    return app


app = create_app()

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
