"""
Investigator Sheet API - Call of Cthulhu character management
FastAPI Backend Entry Point
"""

import io
import logging
import mimetypes
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from charsheet.core.config import settings
from charsheet.core.database import init_db
from charsheet.core.errors import CharacterSheetError
from charsheet.api import backup, characters, images, rules, sessions
from charsheet.api.deps import get_db, get_storage
from charsheet.services.storage import StorageService

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Starting {settings.APP_NAME}...")
    init_db()
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")


app = FastAPI(
    title=settings.APP_NAME,
    description="Call of Cthulhu investigator sheets, session history and backups",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CharacterSheetError)
async def character_sheet_error_handler(request: Request, exc: CharacterSheetError):
    body = {"error": exc.message}
    if exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"error": "Request validation failed", "details": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include routers
app.include_router(characters.router, prefix="/api/v1/characters", tags=["Characters"])
app.include_router(images.router, prefix="/api/v1/characters", tags=["Images"])
app.include_router(sessions.character_router, prefix="/api/v1/characters", tags=["Sessions"])
app.include_router(sessions.router, prefix="/api/v1", tags=["Sessions"])
app.include_router(backup.router, prefix="/api/v1/characters", tags=["Backup"])
app.include_router(rules.router, prefix="/api/v1/rules", tags=["Rules"])


@app.get("/health", tags=["Health"])
async def health_check(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Health check endpoint for monitoring.
    Returns the status of the database and the portrait storage.
    """
    status = {
        "status": "healthy",
        "version": API_VERSION,
        "services": {},
    }

    try:
        db.execute(text("SELECT 1"))
        status["services"]["database"] = "ok"
    except SQLAlchemyError as e:
        status["services"]["database"] = f"error: {str(e)}"
        status["status"] = "degraded"

    if storage.base_path.is_dir():
        status["services"]["storage"] = "ok"
    else:
        status["services"]["storage"] = "error: storage root missing"
        status["status"] = "degraded"

    return status


@app.get("/files/{file_path:path}", tags=["Files"])
async def serve_file(file_path: str, storage: StorageService = Depends(get_storage)):
    """Serve stored portraits."""
    try:
        file_bytes = await storage.get_file(file_path)
    except (OSError, ValueError):
        raise HTTPException(status_code=404, detail="File not found")

    content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
    return StreamingResponse(
        io.BytesIO(file_bytes),
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=3600"},
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": settings.APP_NAME,
        "docs": "/docs",
        "health": "/health",
    }
