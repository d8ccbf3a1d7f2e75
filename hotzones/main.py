# hotzones/main.py
# FastAPI application entry point
# - app settings, middleware and router registration
# - builds the in-memory store, video storage and AI analysis scheduler
# - startup/shutdown handling (logging setup, worker pool shutdown)

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hotzones.analyzer import AnalysisScheduler, VideoAnalyzer
from hotzones.config import Settings
from hotzones.config import settings as default_settings
from hotzones.dependencies import get_settings, get_store
from hotzones.logger import setup_logging
from hotzones.routers import ai_metadata as ai_metadata_router
from hotzones.routers import checkin as checkin_router
from hotzones.routers import comments as comment_router
from hotzones.routers import heatmap as heatmap_router
from hotzones.routers import reactions as reaction_router
from hotzones.routers import videos as video_router
from hotzones.routers import votes as vote_router
from hotzones.schemas import HealthResponse
from hotzones.services import CheckInService, CommentService, FeedService, VideoUploadService
from hotzones.storage import VideoStorage
from hotzones.store import DataStore, initialize_store

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DataStore] = None,
    storage: Optional[VideoStorage] = None,
    scheduler: Optional[AnalysisScheduler] = None,
) -> FastAPI:
    settings = settings or default_settings
    store = store or initialize_store(settings)
    storage = storage or VideoStorage(settings.VIDEO_STORAGE_PATH, settings.FETCH_TIMEOUT_S)
    if scheduler is None and settings.ANALYSIS_ENABLED:
        analyzer = VideoAnalyzer.from_settings(settings, storage, store.ai_metadata, store.clock)
        scheduler = AnalysisScheduler(analyzer, settings.ANALYSIS_WORKERS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)
        logger.info("%s v%s starting", settings.PROJECT_NAME, settings.VERSION)
        logger.info("Video storage: %s", storage.base_dir)
        if not settings.ANALYSIS_ENABLED:
            logger.info("AI analysis disabled")
        elif not settings.VISION_API_KEY:
            logger.warning("VISION_API_KEY is not set; uploads will get analysis_failed metadata")
        else:
            logger.info("AI analysis enabled (provider=%s)", settings.VISION_PROVIDER)

        yield

        logger.info("Application shutting down...")
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        logger.info("Application shutdown complete.")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="""
    Hotzones: anonymous, short-lived, location-scoped event reporting.

    ## Features
    * Check-ins and presence zones (heatmap, pulses, proximal streams)
    * Short video uploads with reactions, votes and proximity-gated comments
    * Privacy-filtered AI scene summaries
    """,
        openapi_url=settings.OPENAPI_URL,
        docs_url=settings.DOCS_URL,
        redoc_url=settings.REDOC_URL,
        swagger_ui_parameters={"defaultModelsExpandDepth": -1},
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.storage = storage
    app.state.scheduler = scheduler
    app.state.checkin_service = CheckInService(store)
    app.state.upload_service = VideoUploadService(store, storage, settings, scheduler)
    app.state.feed_service = FeedService(store)
    app.state.comment_service = CommentService(store, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed input is a 400 for every route
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    app.include_router(checkin_router.router, prefix=settings.API_PREFIX, tags=["Check-in"])
    app.include_router(video_router.router, prefix=settings.API_PREFIX, tags=["Videos"])
    app.include_router(reaction_router.router, prefix=settings.API_PREFIX, tags=["Reactions"])
    app.include_router(vote_router.router, prefix=settings.API_PREFIX, tags=["Votes"])
    app.include_router(comment_router.router, prefix=settings.API_PREFIX, tags=["Comments"])
    app.include_router(heatmap_router.router, prefix=settings.API_PREFIX, tags=["Map"])
    app.include_router(ai_metadata_router.router, prefix=settings.API_PREFIX, tags=["AI"])

    @app.get(settings.API_PREFIX + "/health", response_model=HealthResponse, tags=["Health"])
    def health(store: DataStore = Depends(get_store), settings: Settings = Depends(get_settings)):
        return HealthResponse(
            version=settings.VERSION,
            sessions=len(store.sessions),
            zones=len(store.zones.list()),
            videos=len(store.videos.active_only()),
            analysisEnabled=settings.ANALYSIS_ENABLED,
        )

    @app.get("/")
    def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME} v{settings.VERSION}"}

    return app


app = create_app()

# uvicorn hotzones.main:app --reload
