# config/settings.py
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Profile Frame Service"

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]

    # Auth
    BASIC_AUTH_USERNAME: str = "admin"
    BASIC_AUTH_PASSWORD: str = "secret"

    # Catalog
    DATABASE_URL: str = "sqlite+aiosqlite:///./frames.db"

    # Preview geometry
    COMPACT_BREAKPOINT: float = 1230
    NARROW_BREAKPOINT: float = 600
    SIDE_CONTROLS_MARGIN: float = 200
    CROP_VIEWPORT_SIZE: float = 512

    # Export
    EXPORT_FORMAT: str = "png"
    EXPORT_FILENAME: str = "profile-frame"
    JPEG_QUALITY: int = 90
    EXPORT_TIMEOUT_SECONDS: float = 30
    REQUEST_TIMEOUT: float = 30
    TEXT_BOX_MAX_FRACTION: float = 1.0

    # Text box styling
    PRIMARY_FONT_PATH: Optional[str] = None
    SECONDARY_FONT_PATH: Optional[str] = None
    PRIMARY_FONT_SIZE: int = 24
    SECONDARY_FONT_SIZE: int = 19

    # Env
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Cloudinary (CLOUDINARY_URL in the environment is read by the SDK itself, or set the 3 fields below)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "profile-frames"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
