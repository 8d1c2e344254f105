from pydantic import BaseModel, Field
from typing import Dict, Optional

from app.domain.models import AnchorPosition

class CropSelectionBody(BaseModel):
    offset_x: float = 0.0                  # pan as a fraction of the crop viewport
    offset_y: float = 0.0
    zoom: float = 1.0
    aspect_ratio: float = Field(1.0, gt=0)

class SizeBody(BaseModel):
    width: float
    height: float

class CropResolveRequest(BaseModel):
    selection: CropSelectionBody = Field(default_factory=CropSelectionBody)
    natural_size: Optional[SizeBody] = None  # None while no photo is uploaded
    viewport: Optional[SizeBody] = None      # source pixels covered at zoom 1; defaults to the cover square

class TextBody(BaseModel):
    primary_text: str = "Primary Text"
    secondary_text: str = "Secondary Text"

class TextFitRequest(BaseModel):
    measured_width: Optional[float] = None
    measured_height: Optional[float] = None
    max_width: float
    max_height: float

class ExportRequest(BaseModel):
    frame_id: Optional[str] = None           # defaults to the first approved frame
    # User photo; http(s) URL or base64 (data URLs supported), never a server path
    uploaded_image: Optional[str] = None
    crop: CropSelectionBody = Field(default_factory=CropSelectionBody)
    viewport: Optional[SizeBody] = None
    primary_text: str = "Primary Text"
    secondary_text: str = "Secondary Text"
    position: AnchorPosition = AnchorPosition.TOP_RIGHT
    greyscale: bool = False
    upload: bool = False                     # send to Cloudinary instead of returning the file

class RenderBoxResponse(BaseModel):
    width: float
    height: float
    top: float
    right: float
    bottom: float
    left: float
    scale: float
    crop_viewport: float
    text_offsets: Dict[str, float]
