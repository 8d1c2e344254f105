# app/domain/frame_service.py
import logging
from typing import List, Optional
import base64, os, time, uuid
import asyncio
import aiohttp
import aiofiles
import psutil
from concurrent.futures import ThreadPoolExecutor

from app.domain import crop, text_fit
from app.domain.compositor import FrameArtwork, compose
from app.domain.errors import MissingSource, RenderFailure
from app.domain.models import CompositeResult, FittedSize, FrameTemplate, Size, TextLayer
from app.domain.session import ExportSnapshot
from app.infrastructure.cv import image_process
from app.infrastructure.cloudinary.upload_file import upload_composite
from app.infrastructure.text.rasterizer import TextBlockRenderer

# --- KONFIGURASI ---
REQUEST_TIMEOUT = 30
EXPORT_TIMEOUT = 30

# --- PENGATURAN LOGGER ---
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False # Mencegah log ganda ke root logger

def _memory_mb() -> Optional[float]:
    try:
        return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024
    except psutil.Error as mem_error:
        logger.warning(f"Could not get memory info: {mem_error}")
        return None

class FrameExportService:
    """Runs exports one at a time: a second request waits for the first to finish."""

    def __init__(self, renderer: TextBlockRenderer, cpu_executor: ThreadPoolExecutor, io_executor: ThreadPoolExecutor,
                 fmt: str = "png", quality: int = 90, filename_stem: str = "profile-frame",
                 text_box_max_fraction: float = 1.0, export_timeout: float = EXPORT_TIMEOUT,
                 request_timeout: float = REQUEST_TIMEOUT):
        self.renderer = renderer
        self.cpu_executor = cpu_executor
        self.io_executor = io_executor
        self.fmt = fmt
        self.quality = quality
        self.filename_stem = filename_stem
        self.text_box_max_fraction = text_box_max_fraction
        self.export_timeout = export_timeout
        self.request_timeout = request_timeout
        self._export_lock = asyncio.Lock()

    def measure_text(self, primary_text: str, secondary_text: str):
        return self.renderer.measure(primary_text, secondary_text)

    def fit_text(self, frame: FrameTemplate, text_layer: TextLayer) -> FittedSize:
        return text_fit.fit(
            text_layer.measured_width,
            text_layer.measured_height,
            frame.inner_width * self.text_box_max_fraction,
            frame.inner_height * self.text_box_max_fraction,
        )

    async def _load_image_bytes_async(self, src: Optional[str], session: aiohttp.ClientSession,
                                      allow_path: bool = False) -> Optional[bytes]:
        """Loads an image from a URL, data URL or raw base64. Local paths are only
        read for catalog assets (``allow_path``), never for user uploads."""
        if not src:
            return None
        try:
            if src.startswith(("http://", "https://")):
                timeout = aiohttp.ClientTimeout(total=self.request_timeout)
                async with session.get(src, timeout=timeout) as response:
                    response.raise_for_status()
                    return await response.read()
            if allow_path and os.path.isfile(src):
                async with aiofiles.open(src, "rb") as f:
                    return await f.read()
            if src.startswith("data:image"):
                _, encoded = src.split(",", 1)
                return base64.b64decode(encoded + "===")
            return base64.b64decode(src + "=" * (-len(src) % 4), validate=True)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            logger.warning(f"Gagal memuat gambar dari sumber '{src[:70]}...': {type(e).__name__}")
            return None

    async def _load_export_bytes_async(self, snapshot: ExportSnapshot) -> List[Optional[bytes]]:
        frame = snapshot.frame
        async with aiohttp.ClientSession() as session:
            return await asyncio.gather(
                self._load_image_bytes_async(snapshot.photo_source, session),
                self._load_image_bytes_async(frame.frame, session, allow_path=True),
                self._load_image_bytes_async(frame.overlay, session, allow_path=True),
            )

    def _composite(self, snapshot: ExportSnapshot, photo_bytes: bytes, frame_bytes: Optional[bytes],
                   overlay_bytes: Optional[bytes]) -> CompositeResult:
        frame = snapshot.frame
        photo = image_process.decode_photo(photo_bytes)
        if photo is None:
            raise RenderFailure("uploaded image could not be decoded")
        frame_art = image_process.decode_artwork(frame_bytes)
        if frame_art is None:
            raise RenderFailure("frame artwork could not be loaded", details={"frame": frame.id})
        overlay_art = None
        if frame.overlay:
            overlay_art = image_process.decode_artwork(overlay_bytes)
            if overlay_art is None:
                raise RenderFailure("frame overlay could not be loaded", details={"frame": frame.id})

        rect = crop.resolve(snapshot.selection, Size(*photo.size), snapshot.viewport_size)
        cropped = image_process.crop_region(photo, rect)
        fitted = self.fit_text(frame, snapshot.text_layer) if frame.show_text_box else None
        try:
            return compose(
                frame,
                FrameArtwork(frame=frame_art, overlay=overlay_art),
                cropped,
                snapshot.text_layer,
                fitted,
                snapshot.greyscale,
                self.renderer,
                fmt=self.fmt,
                quality=self.quality,
                filename_stem=self.filename_stem,
            )
        finally:
            cropped.close()
            photo.close()

    async def export(self, snapshot: ExportSnapshot) -> CompositeResult:
        run_id = uuid.uuid4().hex[:8]
        frame = snapshot.frame
        if not snapshot.photo_source:
            raise MissingSource()

        logger.info(f"=== START EXPORT Run ID: {run_id} (frame={frame.id}) ===")
        memory_mb = _memory_mb()
        if memory_mb is not None:
            logger.info(f"Memory usage at start: {memory_mb:.1f}MB for Run ID: {run_id}")
        overall_start_time = time.perf_counter()

        # TAHAP 1: Download Aset
        logger.info(f"Tahap 1/2: Memuat foto pengguna dan aset frame untuk Run ID: {run_id}")
        photo_bytes, frame_bytes, overlay_bytes = await self._load_export_bytes_async(snapshot)
        if photo_bytes is None:
            raise MissingSource(details={"source": snapshot.photo_source[:70]})

        # TAHAP 2: Compositing
        async with self._export_lock:
            logger.info(f"Tahap 2/2: Compositing untuk Run ID: {run_id}")
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(
                self.cpu_executor, self._composite, snapshot, photo_bytes, frame_bytes, overlay_bytes
            )
            try:
                result = await asyncio.wait_for(future, timeout=self.export_timeout)
            except asyncio.TimeoutError as e:
                logger.error(f"TIMEOUT: Compositing exceeded {self.export_timeout}s for Run ID: {run_id}")
                raise RenderFailure("export timed out", details={"timeout": self.export_timeout}) from e

        overall_duration = time.perf_counter() - overall_start_time
        logger.info(f"=== COMPLETED EXPORT Run ID: {run_id} dalam {overall_duration:.2f} detik ({len(result.data)} bytes) ===")
        return result

    async def upload(self, result: CompositeResult, public_id: Optional[str] = None) -> str:
        public_id = public_id or f"{self.filename_stem}-{uuid.uuid4().hex[:12]}"
        loop = asyncio.get_running_loop()
        start_time = time.perf_counter()
        url = await loop.run_in_executor(self.io_executor, upload_composite, result, public_id)
        logger.info(f"Upload selesai dalam {time.perf_counter() - start_time:.2f} detik: {public_id}")
        return url
