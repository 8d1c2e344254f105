# app/domain/session.py
"""
Editing state for one user, and the frozen snapshot an export works from.

Text measurement is an explicit two-phase protocol: changing either string
drops the previous measurement, ``measure`` asks the measurement collaborator
for the new natural size, and only then can a snapshot be taken.
"""
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from app.domain.errors import MeasurementNotReady, MissingSource
from app.domain.models import AnchorPosition, CropSelection, FrameTemplate, Size, TextLayer

Measurer = Callable[[str, str], Tuple[float, float]]


@dataclass(frozen=True)
class ExportSnapshot:
    frame: FrameTemplate
    photo_source: Optional[str]
    selection: CropSelection
    text_layer: TextLayer
    greyscale: bool
    viewport_size: Optional[Size] = None


class EditSession:
    def __init__(self, frame: Optional[FrameTemplate] = None):
        self.frame = frame
        self.photo_source: Optional[str] = None
        self.selection = CropSelection()
        self.viewport_size: Optional[Size] = None
        self.primary_text = "Primary Text"
        self.secondary_text = "Secondary Text"
        self.anchor = AnchorPosition.TOP_RIGHT
        self.greyscale = False
        self._measured: Optional[Tuple[float, float]] = None
        self._measured_for: Optional[Tuple[str, str]] = None

    def select_frame(self, frame: FrameTemplate) -> None:
        self.frame = frame

    def set_photo(self, source: Optional[str]) -> None:
        self.photo_source = source or None
        self.selection = CropSelection(aspect_ratio=self.selection.aspect_ratio)

    def set_crop(self, offset_x: float, offset_y: float, zoom: Optional[float] = None,
                 aspect_ratio: Optional[float] = None) -> None:
        self.selection = replace(
            self.selection,
            offset_x=offset_x,
            offset_y=offset_y,
            zoom=self.selection.zoom if zoom is None else zoom,
            aspect_ratio=self.selection.aspect_ratio if aspect_ratio is None else aspect_ratio,
        )

    def set_viewport(self, viewport_size: Optional[Size]) -> None:
        self.viewport_size = viewport_size

    def set_text(self, primary: Optional[str] = None, secondary: Optional[str] = None) -> None:
        if primary is not None:
            self.primary_text = primary
        if secondary is not None:
            self.secondary_text = secondary
        if self._measured_for != (self.primary_text, self.secondary_text):
            self._measured = None

    def set_anchor(self, anchor) -> None:
        self.anchor = AnchorPosition(anchor)

    def set_greyscale(self, enabled: bool) -> None:
        self.greyscale = bool(enabled)

    @property
    def measurement_ready(self) -> bool:
        return (self._measured is not None
                and self._measured_for == (self.primary_text, self.secondary_text))

    def measure(self, measurer: Measurer) -> Tuple[float, float]:
        texts = (self.primary_text, self.secondary_text)
        width, height = measurer(*texts)
        self._measured = (width, height)
        self._measured_for = texts
        return self._measured

    def text_layer(self) -> TextLayer:
        measured = self._measured if self.measurement_ready else (None, None)
        return TextLayer(
            primary_text=self.primary_text,
            secondary_text=self.secondary_text,
            anchor=self.anchor,
            measured_width=measured[0],
            measured_height=measured[1],
        )

    def snapshot(self) -> ExportSnapshot:
        if self.frame is None:
            raise MissingSource("no frame selected")
        if self.frame.show_text_box and not self.measurement_ready:
            raise MeasurementNotReady()
        return ExportSnapshot(
            frame=self.frame,
            photo_source=self.photo_source,
            selection=self.selection,
            text_layer=self.text_layer(),
            greyscale=self.greyscale,
            viewport_size=self.viewport_size,
        )
