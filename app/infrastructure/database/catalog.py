# app/infrastructure/database/catalog.py
import asyncio
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import FrameTemplate
from app.infrastructure.database.models import Frame

logger = logging.getLogger(__name__)


def to_template(row: Frame) -> FrameTemplate:
    return FrameTemplate(
        id=row.id,
        name=row.name,
        frame=row.frame_uri,
        overlay=row.overlay_uri,
        background=row.background_color or {},
        show_text_box=row.show_text_box,
        **(row.dimensions or {}),
    )


async def fetch_approved_templates(session: AsyncSession) -> List[FrameTemplate]:
    stmt = select(Frame).where(Frame.approved.is_(True)).order_by(Frame.position, Frame.name)
    rows = (await session.execute(stmt)).scalars().all()

    templates = []
    for row in rows:
        try:
            templates.append(to_template(row))
        except (ValidationError, TypeError) as e:
            logger.warning(f"Skipping malformed frame '{row.id}': {e}")
    return templates


class FrameCatalog:
    """Approved frame templates, read from the database once per application run."""

    def __init__(self, session_factory=None, templates: Optional[List[FrameTemplate]] = None):
        self._session_factory = session_factory
        self._templates = list(templates) if templates is not None else None
        self._by_id: Dict[str, FrameTemplate] = {t.id: t for t in self._templates or []}
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._templates is not None

    async def ensure_loaded(self) -> List[FrameTemplate]:
        if self._templates is not None:
            return self._templates
        async with self._lock:
            if self._templates is None:
                async with self._session_factory() as session:
                    templates = await fetch_approved_templates(session)
                self._by_id = {t.id: t for t in templates}
                self._templates = templates
                logger.info(f"Loaded {len(templates)} approved frame templates")
        return self._templates

    async def get(self, frame_id: str) -> Optional[FrameTemplate]:
        await self.ensure_loaded()
        return self._by_id.get(frame_id)

    async def default(self) -> Optional[FrameTemplate]:
        templates = await self.ensure_loaded()
        return templates[0] if templates else None
