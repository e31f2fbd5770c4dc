from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import uvicorn
import logging

from config.logging import setup_logging
from config.env import Settings
from database import Database
from routers import (
    flashcard_sets,
    flashcards,
    collaborators,
    sharing,
    study_sessions,
    ai_generation,
    users,
    uploads
)
from utils.completion import build_completion_client
from utils.s3 import S3BlobStore
from api.errors import AppError

logger = logging.getLogger(__name__)

# Kinds for HTTP errors raised by the framework itself, such as unknown routes
HTTP_ERROR_KINDS = {
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    410: "expired",
}

def _error_response(status_code: int, kind: str, detail, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": kind, "detail": detail},
        headers=headers
    )

def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
        return _error_response(exc.status_code, exc.kind, exc.detail, exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        kind = HTTP_ERROR_KINDS.get(exc.status_code, "internal" if exc.status_code >= 500 else "invalid_input")
        return _error_response(exc.status_code, kind, exc.detail, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()) if part != 'body')}: {error.get('msg')}"
            for error in errors
        ) or "Invalid input"
        return _error_response(400, "invalid_input", message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(500, "internal", "Internal server error")

def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; defaults to values from the environment
        database: Pre-built database handle; when omitted one is created from
            ``settings.database_url`` at startup and disposed at shutdown
    """
    settings = settings or Settings()
    settings.check_jwt_secret()

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version
    )
    app.state.settings = settings
    app.state.database = database
    app.state.completion_client = build_completion_client(settings.completion)
    app.state.blob_store = S3BlobStore(settings.storage)

    @app.on_event("startup")
    async def startup_event():
        """Set up logging and open the database on startup."""
        setup_logging(settings.log_dir)
        if app.state.database is None:
            logger.info("Connecting to database...")
            app.state.database = Database(settings.database_url)
            app.state.owns_database = True
        if settings.auto_create_tables:
            app.state.database.create_all()
        logger.info("Flashcards API ready")

    @app.on_event("shutdown")
    async def shutdown_event():
        if getattr(app.state, "owns_database", False):
            app.state.database.dispose()
            logger.info("Database connections closed")

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],  # Allows all methods
        allow_headers=["*"],  # Allows all headers
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(flashcard_sets.router, prefix="/api/sets", tags=["sets"])
    app.include_router(collaborators.router, prefix="/api/sets", tags=["collaborators"])
    app.include_router(sharing.router, prefix="/api/sets", tags=["sharing"])
    app.include_router(sharing.public_router, prefix="/api/shared", tags=["sharing"])
    app.include_router(flashcards.router, prefix="/api/flashcards", tags=["flashcards"])
    app.include_router(study_sessions.router, prefix="/api/study", tags=["study"])
    app.include_router(ai_generation.router, prefix="/api/ai", tags=["ai"])
    app.include_router(users.router, prefix="/api/auth", tags=["auth"])
    app.include_router(uploads.router, prefix="/api/upload", tags=["upload"])

    @app.get("/")
    async def root():
        return {"message": "Welcome to the Flashcards API"}

    @app.get("/health")
    async def health():
        return {"status": "OK"}

    return app

app = create_app()

if __name__ == "__main__":
    logger.info("Starting Flashcards API server")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
