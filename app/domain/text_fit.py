# app/domain/text_fit.py
from typing import Optional

from app.domain.errors import DegenerateGeometry, MeasurementNotReady
from app.domain.models import FittedSize


def fit(measured_width: Optional[float], measured_height: Optional[float],
        max_width: float, max_height: float) -> FittedSize:
    """Largest size inside ``max_width`` x ``max_height`` with the measured
    block's aspect ratio."""
    if not measured_width or not measured_height or measured_width <= 0 or measured_height <= 0:
        raise MeasurementNotReady(details={"measured": [measured_width, measured_height]})
    if max_width <= 0 or max_height <= 0:
        raise DegenerateGeometry(details={"max": [max_width, max_height]})

    factor = min(max_width / measured_width, max_height / measured_height)
    return FittedSize(
        width=min(measured_width * factor, max_width),
        height=min(measured_height * factor, max_height),
    )
