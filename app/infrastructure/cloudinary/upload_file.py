# app/infrastructure/cloudinary/upload_file.py
from io import BytesIO
from typing import Optional
import cloudinary, cloudinary.uploader
from app.config.settings import settings
from app.domain.models import CompositeResult


# Configure once (the SDK already picked up CLOUDINARY_URL if it is set)
cloudinary.config(
    secure=True,
    **{
        key: value
        for key, value in (
            ("cloud_name", settings.CLOUDINARY_CLOUD_NAME),
            ("api_key", settings.CLOUDINARY_API_KEY),
            ("api_secret", settings.CLOUDINARY_API_SECRET),
        )
        if value is not None
    },
)

def upload_composite(
    result: CompositeResult,
    public_id: str,
    folder: str = settings.CLOUDINARY_FOLDER,
    overwrite: bool = True,
    tags: Optional[list[str]] = None,
) -> str:
    buf = BytesIO(result.data)
    res = cloudinary.uploader.upload(
        buf,
        resource_type="image",
        folder=folder,
        public_id=public_id,
        overwrite=overwrite,
        format=result.extension,  # final extension in Cloudinary
        tags=tags or [],
    )
    return res["secure_url"]
