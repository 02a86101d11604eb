"""Main FastAPI application for Deck Video."""

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from deck_video import __version__
from deck_video.api.models import (
    ArchiveRequest,
    ExtractResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationErrorResponse,
    HealthResponse,
    KeywordRequest,
    KeywordResponse,
    PlaybackResponse,
    SlidePayload,
    VideoResultPayload,
)
from deck_video.config.settings import get_settings
from deck_video.delivery import VideoStore
from deck_video.errors import (
    ExtractionError,
    GenerationError,
    KeywordSuggestionFailed,
    RejectionCategory,
    RemoteRejected,
)
from deck_video.generation.keywords import KeywordSuggester
from deck_video.generation.models import VideoResult
from deck_video.ingestion.models import default_selections
from deck_video.logging_config import configure_logging
from deck_video.pipeline import DeckVideoPipeline

logger = structlog.get_logger(__name__)

# Global instances (initialized on startup)
_pipeline: DeckVideoPipeline | None = None
_keywords: KeywordSuggester | None = None
_store: VideoStore | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    global _pipeline, _keywords, _store

    logger.info("Starting Deck Video API")

    try:
        if _pipeline is None:
            _pipeline = DeckVideoPipeline.from_settings()
        if _keywords is None:
            _keywords = KeywordSuggester()
        if _store is None:
            _store = VideoStore()

        logger.info("All components initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize components", error=str(e))

    yield

    logger.info("Shutting down Deck Video API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app.
    """
    settings = get_settings()
    configure_logging(settings.logging)

    app = FastAPI(
        title="Deck Video API",
        description="Turn PowerPoint decks into generated video clips",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            "Request processed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round(process_time * 1000, 2),
        )

        response.headers["X-Process-Time"] = str(process_time)
        return response

    return app


app = create_app()


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


def _error_status(error: GenerationError) -> int:
    if isinstance(error, RemoteRejected) and error.category in (
        RejectionCategory.SAFETY,
        RejectionCategory.INVALID_ARGUMENT,
    ):
        return 400
    return 502


# ============== API Endpoints ==============


@app.post("/api/v1/slides/extract", response_model=ExtractResponse)
async def extract_slides(file: UploadFile = File(...), ocr: bool = False) -> ExtractResponse:
    """Extract slide text and images from an uploaded PPTX file."""
    if not _pipeline:
        raise HTTPException(status_code=503, detail="Pipeline not initialized")

    start_time = time.time()
    content = await file.read()

    try:
        slides = await _pipeline.extract(content, ocr=ocr)
    except ExtractionError as e:
        logger.warning("Presentation parsing failed", filename=file.filename, error=str(e))
        raise HTTPException(status_code=422, detail=f"Failed to parse the presentation. {e}")

    return ExtractResponse(
        filename=file.filename or "",
        slides=[SlidePayload.from_record(s) for s in slides],
        selections=default_selections(slides),
        processing_time_ms=_elapsed_ms(start_time),
    )


@app.post(
    "/api/v1/videos/generate",
    response_model=GenerateResponse,
    responses={400: {"model": GenerationErrorResponse}, 502: {"model": GenerationErrorResponse}},
)
async def generate_videos(request: GenerateRequest):
    """Generate one clip per slide, or one combined video when a transition is set."""
    if not _pipeline:
        raise HTTPException(status_code=503, detail="Pipeline not initialized")

    start_time = time.time()
    slides = [s.to_record() for s in request.slides]
    completed: list[VideoResult] = []

    def on_update(results: list[VideoResult]) -> None:
        completed[:] = results

    try:
        results = await _pipeline.generate(
            slides,
            request.selections,
            request.config,
            on_update=on_update,
        )
    except GenerationError as e:
        body = GenerationErrorResponse(
            detail=f"Video generation failed. {e}",
            category=e.category.value if isinstance(e, RemoteRejected) else None,
            results=[VideoResultPayload.from_result(r) for r in completed],
        )
        return JSONResponse(status_code=_error_status(e), content=body.model_dump())

    return GenerateResponse(
        results=[VideoResultPayload.from_result(r) for r in results],
        combined=request.config.combined,
        processing_time_ms=_elapsed_ms(start_time),
    )


@app.post("/api/v1/keywords", response_model=KeywordResponse)
async def suggest_keywords(request: KeywordRequest) -> KeywordResponse:
    """Suggest style keywords for a genre."""
    if not _keywords:
        raise HTTPException(status_code=503, detail="Keyword suggester not initialized")

    try:
        keywords = await _keywords.suggest(request.genre)
    except KeywordSuggestionFailed as e:
        raise HTTPException(status_code=502, detail=str(e))

    return KeywordResponse(genre=request.genre.value, keywords=keywords)


@app.get("/api/v1/videos/playback-url", response_model=PlaybackResponse)
async def playback_url(uri: str, expires_in: int = 3600) -> PlaybackResponse:
    """Get a presigned URL for playing a generated video."""
    if not _store:
        raise HTTPException(status_code=503, detail="Video store not initialized")

    try:
        url = _store.presigned_url(uri, expires_in=expires_in)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PlaybackResponse(media_uri=uri, url=url, expires_in=expires_in)


@app.post("/api/v1/videos/archive")
async def download_archive(request: ArchiveRequest) -> Response:
    """Bundle generated videos into a zip download."""
    if not _store:
        raise HTTPException(status_code=503, detail="Video store not initialized")

    results = [r.to_result() for r in request.results]
    try:
        archive = _store.bundle(results)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Archive creation failed", error=str(e))
        raise HTTPException(status_code=502, detail="Failed to fetch generated videos")

    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="slide_videos.zip"'},
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    components = {
        "pipeline": "healthy" if _pipeline else "unavailable",
        "keywords": "healthy" if _keywords else "unavailable",
        "video_store": "healthy" if _store else "unavailable",
    }

    all_healthy = all(status == "healthy" for status in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        version=__version__,
        components=components,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "deck_video.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    run()
