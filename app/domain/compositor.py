# app/domain/compositor.py
"""
Builds the final framed image at the template's canonical resolution.

Layer order, bottom to top:
  background gradient -> frame artwork -> photo -> frame foreground -> text

The frame foreground is either the template's explicit overlay asset, or the
frame artwork itself again when it has see-through pixels over the inner
content area. All coordinates use the (x=left, y=top) convention.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from app.domain.errors import DegenerateGeometry, MeasurementNotReady, MissingSource, RenderFailure
from app.domain.models import CompositeLayout, CompositeResult, FittedSize, FrameTemplate, TextLayer
from app.infrastructure.cv import image_process
from app.infrastructure.text.rasterizer import TextBlockRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameArtwork:
    frame: Image.Image
    overlay: Optional[Image.Image] = None


def _render_text(renderer: TextBlockRenderer, text_layer: TextLayer, fitted: Optional[FittedSize],
                 inner: Tuple[int, int]) -> Image.Image:
    if fitted is None:
        raise MeasurementNotReady()
    size = fitted.pixels()
    if size[0] <= 0 or size[1] <= 0:
        raise DegenerateGeometry(details={"text_box": list(size)})
    if size[0] > inner[0] or size[1] > inner[1]:
        raise DegenerateGeometry("text box does not fit inside the frame",
                                 details={"text_box": list(size), "inner": list(inner)})
    try:
        bitmap = renderer.render(text_layer.primary_text, text_layer.secondary_text)
    except (OSError, ValueError) as e:
        raise RenderFailure("text render failed", details={"reason": str(e)}) from e
    return image_process.resize(bitmap.convert("RGBA"), size)


def compose(frame: FrameTemplate, artwork: FrameArtwork, cropped_photo: Optional[Image.Image],
            text_layer: TextLayer, fitted: Optional[FittedSize], greyscale: bool,
            renderer: TextBlockRenderer, fmt: str = "png", quality: int = 90,
            filename_stem: str = "profile-frame") -> CompositeResult:
    if cropped_photo is None:
        raise MissingSource()

    size = (frame.width, frame.height)
    inner = (frame.inner_width, frame.inner_height)
    if inner[0] <= 0 or inner[1] <= 0:
        raise DegenerateGeometry(details={"frame": frame.id, "inner": list(inner)})

    frame_img = image_process.resize(artwork.frame.convert("RGBA"), size)

    photo = image_process.resize(cropped_photo.convert("RGB"), inner)
    if greyscale:
        photo = image_process.desaturate(photo)

    text_img = None
    text_box = None
    if frame.show_text_box:
        text_img = _render_text(renderer, text_layer, fitted, inner)
        x, y = text_layer.anchor.origin(frame, *text_img.size)
        text_box = (x, y, text_img.size[0], text_img.size[1])

    canvas = image_process.gradient_background(size, frame.background)
    canvas.alpha_composite(frame_img)
    canvas.paste(photo, (frame.left, frame.top))

    if artwork.overlay is not None:
        canvas.alpha_composite(image_process.resize(artwork.overlay.convert("RGBA"), size))
    elif image_process.has_transparent_region(
            frame_img, (frame.left, frame.top, frame.left + inner[0], frame.top + inner[1])):
        canvas.alpha_composite(frame_img)

    if text_img is not None:
        canvas.alpha_composite(text_img, dest=(text_box[0], text_box[1]))

    fmt = (fmt or "png").lower()
    try:
        data = image_process.encode_image(canvas, fmt=fmt, quality=quality)
    except (OSError, ValueError, KeyError) as e:
        raise RenderFailure("image encode failed", details={"format": fmt, "reason": str(e)}) from e

    logger.debug(f"Composed frame '{frame.id}' {size[0]}x{size[1]}, photo at {(frame.left, frame.top)}, text at {text_box}")
    return CompositeResult(
        data=data,
        format=fmt,
        width=size[0],
        height=size[1],
        layout=CompositeLayout(photo_box=(frame.left, frame.top, inner[0], inner[1]), text_box=text_box),
        filename_stem=filename_stem,
    )
