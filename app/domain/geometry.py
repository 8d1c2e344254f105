# app/domain/geometry.py
"""
Responsive scaling of a frame template for the live preview.

Every field of the template's box model is multiplied by one scale factor, so
the inner content area keeps its proportions at any viewport width. These
functions run on every resize signal: they are pure, O(1), and never raise.
"""
from dataclasses import dataclass
from typing import Dict

from app.domain.models import AnchorPosition, FrameTemplate, RenderBox

COMPACT_BREAKPOINT = 1230
NARROW_BREAKPOINT = 600
SIDE_CONTROLS_MARGIN = 200
CROP_VIEWPORT_SIZE = 512


def target_dimension(available_width: float,
                     narrow_breakpoint: float = NARROW_BREAKPOINT,
                     side_margin: float = SIDE_CONTROLS_MARGIN) -> float:
    """Display width for the frame on a compact screen."""
    if available_width < narrow_breakpoint:
        target = available_width - side_margin
        if target <= 0:
            target = available_width / 2
    else:
        target = available_width / 2
    # clamp to a positive size so the preview never collapses or flips
    return target if target > 0 else 1.0


def scale(template: FrameTemplate, available_width: float,
          compact_breakpoint: float = COMPACT_BREAKPOINT,
          narrow_breakpoint: float = NARROW_BREAKPOINT,
          side_margin: float = SIDE_CONTROLS_MARGIN) -> RenderBox:
    if available_width < compact_breakpoint:
        factor = target_dimension(available_width, narrow_breakpoint, side_margin) / template.width
    else:
        factor = 1.0

    return RenderBox(
        width=template.width * factor,
        height=template.height * factor,
        top=template.top * factor,
        right=template.right * factor,
        bottom=template.bottom * factor,
        left=template.left * factor,
        scale=factor,
    )


@dataclass(frozen=True)
class PreviewLayout:
    box: RenderBox
    crop_viewport: float
    text_offsets: Dict[str, float]


def preview_layout(template: FrameTemplate, available_width: float, anchor: AnchorPosition,
                   compact_breakpoint: float = COMPACT_BREAKPOINT,
                   narrow_breakpoint: float = NARROW_BREAKPOINT,
                   side_margin: float = SIDE_CONTROLS_MARGIN,
                   crop_viewport_size: float = CROP_VIEWPORT_SIZE) -> PreviewLayout:
    """Render box plus the square crop viewport and the text box offsets the
    preview needs to lay itself out."""
    box = scale(template, available_width, compact_breakpoint, narrow_breakpoint, side_margin)
    if available_width < compact_breakpoint:
        viewport = target_dimension(available_width, narrow_breakpoint, side_margin)
    else:
        viewport = crop_viewport_size
    return PreviewLayout(box=box, crop_viewport=viewport, text_offsets=anchor.preview_offsets(box))
