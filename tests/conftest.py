"""
Shared fixtures for the profile frame service tests.

Images are generated in memory so the suite needs no asset files.
"""
import base64
import io
from concurrent.futures import ThreadPoolExecutor

import pytest
from PIL import Image

from app.domain.models import FrameTemplate
from app.infrastructure.text.rasterizer import TextBlockRenderer

FRAME_RED = (200, 30, 30, 255)
PHOTO_BLUE = (20, 60, 220)


def png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def data_url(img: Image.Image) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(img)).decode("ascii")


def make_frame_image(width=512, height=512, top=50, right=20, bottom=50, left=20) -> Image.Image:
    """Opaque red border with a see-through inner content area."""
    img = Image.new("RGBA", (width, height), FRAME_RED)
    img.paste((0, 0, 0, 0), (left, top, width - right, height - bottom))
    return img


@pytest.fixture
def frame_image():
    return make_frame_image()


@pytest.fixture
def template(frame_image):
    return FrameTemplate(
        id="classic",
        name="Classic",
        width=512,
        height=512,
        top=50,
        right=20,
        bottom=50,
        left=20,
        background={"type": "linear", "color1": "#FDC830", "color2": "#F37335"},
        show_text_box=True,
        frame=data_url(frame_image),
    )


@pytest.fixture
def photo_image():
    return Image.new("RGB", (600, 400), PHOTO_BLUE)


@pytest.fixture
def photo_data_url(photo_image):
    return data_url(photo_image)


@pytest.fixture
def renderer():
    return TextBlockRenderer()


@pytest.fixture
def executors():
    cpu = ThreadPoolExecutor(max_workers=1)
    io_pool = ThreadPoolExecutor(max_workers=2)
    yield cpu, io_pool
    cpu.shutdown(wait=True)
    io_pool.shutdown(wait=True)
