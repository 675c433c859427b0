from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np

from deepfilter_data_model.constants import EARTH_RADIUS_METERS
from deepfilter_data_model.geo_models import GeoPoint
from deepfilter_engine.core.record_accessor import is_number, unwrap_scalar


def coerce_geo_point(value: Any) -> Optional[GeoPoint]:
    """
    Read a record value as a point; anything else, or out of range, is ``None``.
    Ranges are checked here, so the point is built without validation.
    """
    if isinstance(value, GeoPoint):
        return value
    if isinstance(value, Mapping):
        lat, lng = value.get("lat"), value.get("lng")
    else:
        lat, lng = getattr(value, "lat", None), getattr(value, "lng", None)
    if not (is_number(lat) and is_number(lng)):
        return None
    lat, lng = float(unwrap_scalar(lat)), float(unwrap_scalar(lng))
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return GeoPoint.model_construct(lat=lat, lng=lng)


def haversine_distance(p1: GeoPoint, p2: GeoPoint) -> float:
    """Great circle distance in meters."""
    return float(haversine_distances(np.array([p1.lat]), np.array([p1.lng]), p2)[0])


def haversine_distances(lats: np.ndarray, lngs: np.ndarray, center: GeoPoint) -> np.ndarray:
    """Vectorised great circle distances in meters from ``center`` to each (lat, lng)."""
    lat1 = np.radians(lats)
    lat2 = np.radians(center.lat)
    # normalise the longitude delta into [-180, 180]
    delta_lng = (np.asarray(lngs, dtype=float) - center.lng + 180.0) % 360.0 - 180.0
    delta_lat = lat2 - lat1
    a = np.sin(delta_lat / 2.0) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(np.radians(delta_lng) / 2.0) ** 2
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(np.clip(1.0 - a, 0.0, None)))
    return EARTH_RADIUS_METERS * c


def polygon_arrays(points: Sequence[GeoPoint]) -> Tuple[np.ndarray, np.ndarray]:
    lats = np.array([p.lat for p in points], dtype=float)
    lngs = np.array([p.lng for p in points], dtype=float)
    return lats, lngs


def point_in_polygon(point: GeoPoint, lats: np.ndarray, lngs: np.ndarray) -> bool:
    """
    Ray casting test. A point exactly on a vertex counts as outside; points on
    an edge fall on either side depending on the edge orientation.
    """
    if np.any((lats == point.lat) & (lngs == point.lng)):
        return False
    prev_lats = np.roll(lats, 1)
    prev_lngs = np.roll(lngs, 1)
    straddles = (lngs > point.lng) != (prev_lngs > point.lng)
    with np.errstate(divide="ignore", invalid="ignore"):
        crossing_lat = (prev_lats - lats) * (point.lng - lngs) / (prev_lngs - lngs) + lats
    hits = straddles & (point.lat < crossing_lat)
    return bool(np.count_nonzero(hits) % 2)
