"""Geographic helpers: distances and bounding boxes."""

from .bbox import BoundingBox, convert_external_box, narrow_box, wide_box
from .distance import haversine_km, haversine_m

__all__ = [
    "BoundingBox",
    "convert_external_box",
    "haversine_km",
    "haversine_m",
    "narrow_box",
    "wide_box",
]
