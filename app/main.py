# app/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor
import threading
import logging
import os

from app.config.settings import settings
from app.config.database import AsyncSessionLocal
from app.delivery.api.frames import router
from app.domain.errors import FrameError
from app.domain.frame_service import FrameExportService
from app.infrastructure.database.catalog import FrameCatalog
from app.infrastructure.text.rasterizer import TextBlockRenderer, TextBoxStyle

logger = logging.getLogger("uvicorn.error")

# --- Lazy service bootstrap state ---
_service_lock = threading.Lock()

def _ensure_service(app: FastAPI) -> None:
    with _service_lock:  # Always acquire lock first
        if getattr(app.state, "frame_service", None) is not None:
            return
        logger.info("Initializing FrameExportService and frame catalog (lazy-init)...")
        renderer = TextBlockRenderer(TextBoxStyle(
            primary_font_path=settings.PRIMARY_FONT_PATH,
            secondary_font_path=settings.SECONDARY_FONT_PATH,
            primary_size=settings.PRIMARY_FONT_SIZE,
            secondary_size=settings.SECONDARY_FONT_SIZE,
        ))
        app.state.frame_service = FrameExportService(
            renderer=renderer,
            cpu_executor=app.state.cpu_executor,
            io_executor=app.state.io_executor,
            fmt=settings.EXPORT_FORMAT,
            quality=settings.JPEG_QUALITY,
            filename_stem=settings.EXPORT_FILENAME,
            text_box_max_fraction=settings.TEXT_BOX_MAX_FRACTION,
            export_timeout=settings.EXPORT_TIMEOUT_SECONDS,
            request_timeout=settings.REQUEST_TIMEOUT,
        )
        if getattr(app.state, "catalog", None) is None:
            app.state.catalog = FrameCatalog(AsyncSessionLocal)
        logger.info("Service initialization finished.")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # one compositor run at a time; uploads get their own pool
    app.state.cpu_executor = ThreadPoolExecutor(max_workers=1)
    app.state.io_executor = ThreadPoolExecutor(max_workers=min(4, os.cpu_count() or 1))
    logger.info(f"'{settings.PROJECT_NAME}' started (mode: {settings.ENVIRONMENT}).")
    yield
    logger.info("Shutting down executors...")
    app.state.frame_service = None
    app.state.cpu_executor.shutdown(wait=True)
    app.state.io_executor.shutdown(wait=True)
    logger.info(f"'{settings.PROJECT_NAME}' stopped.")

app = FastAPI(
    title="Profile Frame Service",
    description="Overlays a cropped photo and custom text onto decorative frame templates and exports the composite image",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazy-load only for API routes
@app.middleware("http")
async def lazy_boot(request: Request, call_next):
    if request.url.path.startswith(settings.API_V1_STR):
        _ensure_service(request.app)
    return await call_next(request)

@app.exception_handler(FrameError)
async def frame_error_handler(request: Request, exc: FrameError):
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

app.include_router(router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": "Profile Frame Service", "version": "1.0.0", "status": "ok"}

@app.get("/health")
async def health_check():
    catalog = getattr(app.state, "catalog", None)
    return {
        "status": "ok",
        "service": "Profile Frame 1.0",
        "service_ready": getattr(app.state, "frame_service", None) is not None,
        "catalog_loaded": bool(catalog and catalog.loaded),
    }
