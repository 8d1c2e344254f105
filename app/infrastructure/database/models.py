import uuid
from sqlalchemy import Boolean, Column, Integer, JSON, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class Frame(Base):
    __tablename__ = "frames"

    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String, nullable=False)
    frame_uri = Column(String, nullable=False)  # URL, path or data URL of the frame artwork
    overlay_uri = Column(String)  # optional foreground drawn over the photo
    dimensions = Column(JSON)  # width, height, top, right, bottom, left at authoring resolution
    background_color = Column(JSON)  # type, color1, color2
    show_text_box = Column(Boolean, default=True, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=0, nullable=False)
