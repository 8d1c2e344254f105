# app/domain/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Size(NamedTuple):
    width: float
    height: float


class BackgroundGradient(BaseModel):
    model_config = ConfigDict(frozen=True)

    # "linear" paints color1 -> color2 left to right, "radial" paints center -> edge
    kind: str = Field("linear", validation_alias=AliasChoices("kind", "type"))
    color1: str = "#ffffff"
    color2: str = "#ffffff"


class FrameTemplate(BaseModel):
    """Catalog entry describing a decorative frame at its authoring resolution.

    The insets are measured inward from each edge and bound the inner content
    area where the user's photo shows through.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    top: int = Field(0, ge=0)
    right: int = Field(0, ge=0)
    bottom: int = Field(0, ge=0)
    left: int = Field(0, ge=0)
    background: BackgroundGradient = Field(default_factory=BackgroundGradient)
    show_text_box: bool = True
    frame: str
    overlay: Optional[str] = None

    @property
    def inner_width(self) -> int:
        return self.width - self.left - self.right

    @property
    def inner_height(self) -> int:
        return self.height - self.top - self.bottom


@dataclass(frozen=True)
class RenderBox:
    width: float
    height: float
    top: float
    right: float
    bottom: float
    left: float
    scale: float


@dataclass(frozen=True)
class CropSelection:
    offset_x: float = 0.0  # pan, as a fraction of the crop viewport width
    offset_y: float = 0.0
    zoom: float = 1.0
    aspect_ratio: float = 1.0


@dataclass(frozen=True)
class CropRect:
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class FittedSize:
    width: float
    height: float

    def pixels(self) -> Tuple[int, int]:
        return int(round(self.width)), int(round(self.height))


class AnchorPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    def origin(self, frame: FrameTemplate, box_width: int, box_height: int) -> Tuple[int, int]:
        """Top-left corner (x, y) of a box of the given size placed in this corner
        of the frame's inner content area."""
        if self is AnchorPosition.TOP_LEFT:
            return frame.left, frame.top
        if self is AnchorPosition.TOP_RIGHT:
            return frame.width - frame.right - box_width, frame.top
        if self is AnchorPosition.BOTTOM_LEFT:
            return frame.left, frame.height - frame.bottom - box_height
        return frame.width - frame.right - box_width, frame.height - frame.bottom - box_height

    def preview_offsets(self, box: RenderBox) -> dict:
        """CSS-style edge offsets that pin the live-preview text box to this corner."""
        if self is AnchorPosition.TOP_LEFT:
            return {"top": box.top, "left": box.left}
        if self is AnchorPosition.TOP_RIGHT:
            return {"top": box.top, "right": box.right}
        if self is AnchorPosition.BOTTOM_LEFT:
            return {"bottom": box.bottom, "left": box.left}
        return {"bottom": box.bottom, "right": box.right}


@dataclass(frozen=True)
class TextLayer:
    primary_text: str
    secondary_text: str
    anchor: AnchorPosition = AnchorPosition.TOP_RIGHT
    measured_width: Optional[float] = None
    measured_height: Optional[float] = None


@dataclass(frozen=True)
class CompositeLayout:
    """Where each layer landed on the canvas, as (x, y, width, height)."""
    photo_box: Tuple[int, int, int, int]
    text_box: Optional[Tuple[int, int, int, int]] = None


@dataclass(frozen=True)
class CompositeResult:
    data: bytes = field(repr=False)
    format: str
    width: int
    height: int
    layout: CompositeLayout
    filename_stem: str = "profile-frame"

    @property
    def extension(self) -> str:
        return "jpg" if self.format in ("jpg", "jpeg") else self.format

    @property
    def filename(self) -> str:
        return f"{self.filename_stem}.{self.extension}"

    @property
    def media_type(self) -> str:
        return "image/jpeg" if self.extension == "jpg" else f"image/{self.extension}"
