# app/domain/crop.py
"""
Maps the interactive crop window back onto the untransformed source photo.

The crop viewport is a fixed square window over the photo. At zoom 1 it covers
``viewport`` source pixels; zooming in shrinks that footprint by the zoom
factor, and panning moves it by ``offset * viewport / zoom`` pixels.
Panning is not restricted while editing, so the resolved rectangle is always
clamped to the photo's extent before anything reads from it.
"""
import math
from typing import Optional

from app.domain.errors import InvalidCrop, MissingSource
from app.domain.models import CropRect, CropSelection, Size


def cover_viewport(natural_size: Size, aspect_ratio: float = 1.0) -> Size:
    """Largest ``aspect_ratio`` rectangle inside the photo: the source footprint
    of the crop viewport at zoom 1 when the photo covers the viewport."""
    nat_w, nat_h = natural_size
    if nat_w / nat_h >= aspect_ratio:
        return Size(nat_h * aspect_ratio, nat_h)
    return Size(nat_w, nat_w / aspect_ratio)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _finite_or(value: float, default: float) -> float:
    return value if math.isfinite(value) else default


def resolve(selection: CropSelection, natural_size: Optional[Size],
            viewport_size: Optional[Size] = None) -> CropRect:
    if natural_size is None or not all(math.isfinite(v) and v > 0 for v in natural_size):
        raise MissingSource()

    zoom = selection.zoom
    if not math.isfinite(zoom) or zoom < 1:
        raise InvalidCrop("zoom must be at least 1", details={"zoom": zoom})

    nat_w, nat_h = max(1, int(natural_size[0])), max(1, int(natural_size[1]))
    aspect = _finite_or(selection.aspect_ratio, 1.0)
    if viewport_size is None or not all(math.isfinite(v) and v > 0 for v in viewport_size):
        viewport_size = cover_viewport(Size(nat_w, nat_h), aspect if aspect > 0 else 1.0)
    view_w, view_h = viewport_size
    offset_x = _finite_or(selection.offset_x, 0.0)
    offset_y = _finite_or(selection.offset_y, 0.0)

    # at least one source pixel however far the view is zoomed in
    width = _clamp(view_w / zoom, 1, nat_w)
    height = _clamp(view_h / zoom, 1, nat_h)
    x = (nat_w - view_w / zoom) / 2 - offset_x * view_w / zoom
    y = (nat_h - view_h / zoom) / 2 - offset_y * view_h / zoom

    rect_w = max(1, int(round(width)))
    rect_h = max(1, int(round(height)))
    rect_x = int(round(_clamp(x, 0, nat_w - width)))
    rect_y = int(round(_clamp(y, 0, nat_h - height)))
    # rounding can push the far edge one pixel past the photo
    rect_x = min(rect_x, nat_w - rect_w)
    rect_y = min(rect_y, nat_h - rect_h)
    return CropRect(x=rect_x, y=rect_y, width=rect_w, height=rect_h)
