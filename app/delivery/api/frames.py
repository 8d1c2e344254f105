# app/delivery/api/frames.py
from fastapi import APIRouter, Request, Depends, HTTPException, Query, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.responses import JSONResponse, Response
from app.delivery.schemas.body import (
    CropResolveRequest, ExportRequest, RenderBoxResponse, TextBody, TextFitRequest,
)
from app.config.settings import settings
from app.domain import crop, geometry, text_fit
from app.domain.errors import FrameError
from app.domain.models import AnchorPosition, CropSelection, Size
from app.domain.session import EditSession
import secrets
import logging
import traceback
import asyncio

router = APIRouter()
security = HTTPBasic()
logger = logging.getLogger("uvicorn.error")

def verify_basic_auth(creds: HTTPBasicCredentials = Depends(security)) -> None:
    ok_user = secrets.compare_digest(creds.username, settings.BASIC_AUTH_USERNAME)
    ok_pass = secrets.compare_digest(creds.password, settings.BASIC_AUTH_PASSWORD)
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

ENDPOINT_TIMEOUT_SECONDS = 55

def _catalog(request: Request):
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again in a moment.",
        )
    return catalog

def _service(request: Request):
    service = getattr(request.app.state, "frame_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again in a moment.",
        )
    return service

async def _frame_or_404(request: Request, frame_id):
    catalog = _catalog(request)
    frame = await (catalog.get(frame_id) if frame_id else catalog.default())
    if frame is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Frame '{frame_id}' not found")
    return frame

@router.get("/frames")
async def list_frames(request: Request):
    templates = await _catalog(request).ensure_loaded()
    return [t.model_dump() for t in templates]

@router.get("/frames/{frame_id}/render-box", response_model=RenderBoxResponse)
async def render_box(
    request: Request,
    frame_id: str,
    available_width: float = Query(..., gt=0),
    position: AnchorPosition = AnchorPosition.TOP_RIGHT,
):
    frame = await _frame_or_404(request, frame_id)
    layout = geometry.preview_layout(
        frame,
        available_width,
        position,
        compact_breakpoint=settings.COMPACT_BREAKPOINT,
        narrow_breakpoint=settings.NARROW_BREAKPOINT,
        side_margin=settings.SIDE_CONTROLS_MARGIN,
        crop_viewport_size=settings.CROP_VIEWPORT_SIZE,
    )
    box = layout.box
    return RenderBoxResponse(
        width=box.width, height=box.height, top=box.top, right=box.right,
        bottom=box.bottom, left=box.left, scale=box.scale,
        crop_viewport=layout.crop_viewport, text_offsets=layout.text_offsets,
    )

@router.post("/crop/resolve")
async def resolve_crop(body: CropResolveRequest):
    natural = Size(body.natural_size.width, body.natural_size.height) if body.natural_size else None
    viewport = Size(body.viewport.width, body.viewport.height) if body.viewport else None
    rect = crop.resolve(CropSelection(**body.selection.model_dump()), natural, viewport)
    return {"x": rect.x, "y": rect.y, "width": rect.width, "height": rect.height}

@router.post("/text/measure")
async def measure_text(request: Request, body: TextBody):
    width, height = _service(request).measure_text(body.primary_text, body.secondary_text)
    return {"width": width, "height": height}

@router.post("/text/fit")
async def fit_text(body: TextFitRequest):
    fitted = text_fit.fit(body.measured_width, body.measured_height, body.max_width, body.max_height)
    return {"width": fitted.width, "height": fitted.height}

@router.post("/export", dependencies=[Depends(verify_basic_auth)])
async def export_frame(request: Request, body: ExportRequest):
    service = _service(request)
    frame = await _frame_or_404(request, body.frame_id)
    logger.info(f"=== EXPORT START for frame {frame.id} ===")

    session = EditSession(frame)
    session.set_photo(body.uploaded_image)
    session.set_crop(body.crop.offset_x, body.crop.offset_y, body.crop.zoom, body.crop.aspect_ratio)
    if body.viewport:
        session.set_viewport(Size(body.viewport.width, body.viewport.height))
    session.set_text(body.primary_text, body.secondary_text)
    session.set_anchor(body.position)
    session.set_greyscale(body.greyscale)
    if frame.show_text_box:
        session.measure(service.measure_text)

    try:
        result = await asyncio.wait_for(service.export(session.snapshot()), timeout=ENDPOINT_TIMEOUT_SECONDS)
        if body.upload:
            url = await service.upload(result)
            logger.info(f"=== EXPORT SUCCESS for frame {frame.id} (uploaded) ===")
            return JSONResponse(status_code=200, content={"url": url, "filename": result.filename})
        logger.info(f"=== EXPORT SUCCESS for frame {frame.id} ===")
        return Response(
            content=result.data,
            media_type=result.media_type,
            headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
        )

    except asyncio.TimeoutError:
        logger.error(f"=== EXPORT TIMEOUT for frame {frame.id} after {ENDPOINT_TIMEOUT_SECONDS}s ===")
        raise HTTPException(status_code=504, detail="Export timed out")
    except (HTTPException, FrameError):
        raise
    except Exception as e:
        logger.error(f"=== EXPORT ERROR for frame {frame.id}: {e} ===\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Export failed because of an internal error.",
        )
