"""
Placipy - Main Application

FastAPI backend with:
- MongoDB for PK/SK keyed tables
- Judge0 for code evaluation
- Bearer-token (JWT) identity

Run: uvicorn placipy.main:app --reload
"""

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from placipy import __version__
from placipy.api import api_router
from placipy.core.config import Settings, get_settings
from placipy.core.errors import NotFoundError, PlacipyError
from placipy.core.logging_config import setup_logging
from placipy.db.mongodb import get_mongo_client, get_mongo_db, init_mongo_indexes, ping_mongo
from placipy.schemas.schemas import ErrorResponse
from placipy.services.judge0_client import Judge0Client

logger = logging.getLogger(__name__)


def error_body(message: str) -> dict:
    return ErrorResponse(message=message).model_dump()


def create_app(
    settings: Optional[Settings] = None,
    mongo_client: Optional[MongoClient] = None,
    judge_transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Build the application. Clients are created here and shared through
    app.state; tests pass their own settings, Mongo client and Judge0
    transport.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Placipy Assessment Platform",
        description="""
        Placement training assessments for colleges.

        ## Features
        - **Assessments**: Create, list, update and delete assessments with embedded questions
        - **Code Evaluation**: Run programming answers against stored test cases on Judge0
        - **Notifications**: Assessment reminders (sent once per student and reminder type)
        - **PTO**: Departments, staff and students of a college
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    mongo_client = mongo_client or get_mongo_client(settings)
    app.state.settings = settings
    app.state.mongo_client = mongo_client
    app.state.mongo_db = get_mongo_db(mongo_client, settings)
    app.state.judge_client = Judge0Client(settings, transport=judge_transport)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        """Initialize MongoDB indexes on startup."""
        try:
            init_mongo_indexes(app.state.mongo_db, settings)
        except PyMongoError as e:
            logger.warning("MongoDB index initialization failed: %s", e)

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        logger.warning("Validation error on %s: %s", request.url.path, message)
        return JSONResponse(status_code=400, content=error_body(message or "Invalid request"))

    @app.exception_handler(NotFoundError)
    async def not_found_exception_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body(str(exc)))

    @app.exception_handler(PlacipyError)
    async def service_exception_handler(request: Request, exc: PlacipyError):
        logger.error("Service error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content=error_body(str(exc)))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(status_code=500, content=error_body(str(exc) or "Internal server error"))

    @app.get("/", tags=["Health"])
    async def root():
        return {"status": "healthy", "app": "Placipy Assessment Platform", "version": __version__}

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check."""
        return {
            "status": "healthy",
            "mongodb": "connected" if ping_mongo(app.state.mongo_client) else "disconnected"
        }

    return app


app = create_app()
