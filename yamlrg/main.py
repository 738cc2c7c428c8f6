"""YAMLRG Members Portal API - Main Application"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from yamlrg.config import Settings, get_settings
from yamlrg.dependencies import Services, build_services
from yamlrg.errors import PortalError
from yamlrg.routes import auth, join_requests, members, notifications, users, workshops

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """Build the application. Tests pass pre-wired services."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"Starting {settings.app_name}...")
        yield
        logger.info(f"Shutting down {settings.app_name}...")
        app.state.services.store.close()

    app = FastAPI(
        title=settings.app_name,
        description="Membership portal API - join requests, members, jobs and workshops",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services or build_services(settings)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.frontend_url,
            f"https://{settings.domain}",
            "http://localhost:3000",  # Dev frontend
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        """Map domain errors to their HTTP status"""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(f"{type(exc).__name__} on {request.url.path}: {exc.message} {exc.context()}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(join_requests.router, prefix="/api/join-requests", tags=["Join Requests"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(members.router, prefix="/api", tags=["Members"])
    app.include_router(workshops.router, prefix="/api", tags=["Workshops"])
    app.include_router(notifications.router, prefix="/api", tags=["Notifications"])

    # Health check endpoints
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "yamlrg-portal-api",
            "version": VERSION
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint"""
        return {
            "name": settings.app_name,
            "version": VERSION,
            "docs": "/docs"
        }

    return app


app = create_app()
