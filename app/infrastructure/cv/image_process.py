# app/infrastructure/cv/image_process.py
import io
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image, ImageColor

from app.domain.models import BackgroundGradient, CropRect


def decode_photo(b: bytes) -> Optional[Image.Image]:
    """Decode an uploaded photo into an RGB image at its natural size."""
    if not b: return None
    arr = np.frombuffer(b, np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if img is None: return None
    return Image.fromarray(cv2.cvtColor(img, cv2.COLOR_BGR2RGB))

def decode_artwork(b: bytes) -> Optional[Image.Image]:
    """Decode frame artwork keeping its alpha channel."""
    if not b: return None
    try:
        img = Image.open(io.BytesIO(b))
        img.load()
    except (OSError, Image.DecompressionBombError):
        return None
    return img.convert("RGBA")

def crop_region(image_pil: Image.Image, rect: CropRect) -> Image.Image:
    return image_pil.crop(rect.box)

def resize(image_pil: Image.Image, size: Tuple[int, int]) -> Image.Image:
    if image_pil.size == tuple(size):
        return image_pil.copy()
    return image_pil.resize(size, Image.Resampling.LANCZOS)

def desaturate(image_pil: Image.Image) -> Image.Image:
    arr = np.array(image_pil.convert("RGB"))
    gray = cv2.cvtColor(arr, cv2.COLOR_RGB2GRAY)
    return Image.fromarray(cv2.cvtColor(gray, cv2.COLOR_GRAY2RGB))

def gradient_background(size: Tuple[int, int], gradient: BackgroundGradient) -> Image.Image:
    width, height = size
    c1 = np.array(ImageColor.getrgb(gradient.color1)[:3], dtype=np.float32)
    c2 = np.array(ImageColor.getrgb(gradient.color2)[:3], dtype=np.float32)

    if gradient.kind == "radial":
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
        cx, cy = (width - 1) / 2, (height - 1) / 2
        dist = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
        t = dist / max(float(dist.max()), 1.0)
    else:
        # linear-gradient(to right, color1, color2)
        row = np.linspace(0.0, 1.0, width, dtype=np.float32)
        t = np.broadcast_to(row, (height, width))

    pixels = c1 + (c2 - c1) * t[..., None]
    rgb = np.clip(np.rint(pixels), 0, 255).astype(np.uint8)
    return Image.fromarray(rgb, "RGB").convert("RGBA")

def has_transparent_region(image_pil: Image.Image, box: Tuple[int, int, int, int]) -> bool:
    """True when the image has see-through pixels inside ``box``."""
    if image_pil.mode != "RGBA":
        return False
    low, _ = image_pil.getchannel("A").crop(box).getextrema()
    return low < 255

def encode_image(img: Image.Image, fmt: str = "png", quality: int = 90) -> bytes:
    fmt = (fmt or "png").lower()
    # Map to a valid Pillow format string
    if fmt in ("jpg", "jpeg"):
        # JPEG can't have alpha
        if img.mode != "RGB":
            img = img.convert("RGB")
        save_kwargs = dict(format="JPEG", quality=quality, optimize=True)
    elif fmt == "png":
        save_kwargs = dict(format="PNG", optimize=True)
    else:
        save_kwargs = dict(format=fmt.upper())

    buf = io.BytesIO()
    img.save(buf, **save_kwargs)
    return buf.getvalue()
