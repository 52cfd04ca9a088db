"""FastAPI application for repo-gallery.

Exposes the gallery service to a browser front end. The routes add no
catalog semantics of their own: they validate input, call the service and
return its result values unchanged.

Run with:
    uvicorn repo_gallery.main:app --reload

Tests:
    - tests/unit/test_main.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from repo_gallery import __version__
from repo_gallery.config import get_settings
from repo_gallery.errors import ConfigurationError, GalleryError, describe_error
from repo_gallery.schemas import DeleteResult, ReconcileReport, UploadResult
from repo_gallery.storage.catalog import Catalog
from repo_gallery.storage.service import GalleryService
from repo_gallery.validation import validate_image_file

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    configured: bool
    missing: list[str]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the gallery service once and close it on shutdown.

    Missing configuration leaves ``app.state.service`` unset; image routes
    then answer 503 until the process is restarted with credentials.
    """
    logger.info(f"Starting repo-gallery v{__version__}")
    app.state.service = None
    app.state.config_error = None
    try:
        app.state.service = GalleryService.from_settings(get_settings())
        logger.info(f"Serving gallery for {app.state.service.config.repo}")
    except ConfigurationError as e:
        app.state.config_error = str(e)
        logger.error(f"Gallery not configured: {e}")

    yield

    logger.info("Shutting down repo-gallery")
    if app.state.service is not None:
        await app.state.service.close()


settings = get_settings()

app = FastAPI(
    title="repo-gallery",
    description="Image gallery persisted in a GitHub repository",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_gallery_service(request: Request) -> GalleryService:
    """Dependency returning the configured service or a 503."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        detail = getattr(request.app.state, "config_error", None) or "Gallery is not configured"
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return service


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions with consistent response format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "detail": None},
    )


@app.exception_handler(GalleryError)
async def gallery_exception_handler(request, exc: GalleryError):
    """Store failures outside the orchestrators (listing, reconcile)."""
    logger.error(f"Gallery error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": describe_error(exc), "detail": str(exc) if settings.DEBUG else None},
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Report version and whether the store is configured."""
    current = get_settings()
    missing = current.missing_variables()
    return HealthResponse(
        status="healthy" if not missing else "unconfigured",
        version=__version__,
        configured=not missing,
        missing=missing,
    )


@app.get("/api/images", response_model=Catalog, tags=["Images"])
async def list_images(service: GalleryService = Depends(get_gallery_service)) -> Catalog:
    """Return the catalog, newest first."""
    return await service.fetch_metadata()


@app.get("/api/images/reconcile", response_model=ReconcileReport, tags=["Images"])
async def reconcile_images(
    service: GalleryService = Depends(get_gallery_service),
) -> ReconcileReport:
    """Report orphaned blobs and dangling catalog entries."""
    return await service.reconcile()


@app.post(
    "/api/images",
    response_model=UploadResult,
    status_code=status.HTTP_201_CREATED,
    tags=["Images"],
)
async def upload_image(
    file: UploadFile = File(...),
    description: str = Form(""),
    service: GalleryService = Depends(get_gallery_service),
):
    """Validate and upload one image."""
    data = await file.read()
    validation = validate_image_file(data, file.content_type, len(data))
    if not validation.valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=validation.error)

    result = await service.upload(data, file.filename or "image", description)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=result.model_dump(),
        )
    return result


@app.delete("/api/images/{filename}", response_model=DeleteResult, tags=["Images"])
async def delete_image(
    filename: str,
    service: GalleryService = Depends(get_gallery_service),
):
    """Delete one image and its catalog entry."""
    result = await service.delete(filename)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=result.model_dump(),
        )
    return result
