from typing import Any, NamedTuple

import numpy as np

from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_data_model.geo_models import BoundingBox, NearQuery, PolygonQuery, parse_geo_argument
from deepfilter_engine.utils.geo_distance import (
    coerce_geo_point, haversine_distance, point_in_polygon, polygon_arrays
)


class PreparedPolygon(NamedTuple):
    query: PolygonQuery
    lats: np.ndarray
    lngs: np.ndarray


def parse_near_argument(operator: str, argument: Any) -> NearQuery:
    return parse_geo_argument(NearQuery, operator, argument)


def parse_geo_box_argument(operator: str, argument: Any) -> BoundingBox:
    return parse_geo_argument(BoundingBox, operator, argument)


def parse_geo_polygon_argument(operator: str, argument: Any) -> PreparedPolygon:
    query = parse_geo_argument(PolygonQuery, operator, argument)
    lats, lngs = polygon_arrays(query.points)
    return PreparedPolygon(query, lats, lngs)


def evaluate_near(value: Any, argument: NearQuery, config: FilterConfig) -> bool:
    point = coerce_geo_point(value)
    if point is None:
        return False
    distance = haversine_distance(point, argument.center)
    if argument.min_distance_meters is not None and distance < argument.min_distance_meters:
        return False
    return distance <= argument.max_distance_meters


def evaluate_geo_box(value: Any, argument: BoundingBox, config: FilterConfig) -> bool:
    point = coerce_geo_point(value)
    if point is None:
        return False
    if not argument.southwest.lat <= point.lat <= argument.northeast.lat:
        return False
    if argument.crosses_antimeridian:
        return point.lng >= argument.southwest.lng or point.lng <= argument.northeast.lng
    return argument.southwest.lng <= point.lng <= argument.northeast.lng


def evaluate_geo_polygon(value: Any, argument: PreparedPolygon, config: FilterConfig) -> bool:
    point = coerce_geo_point(value)
    if point is None:
        return False
    return point_in_polygon(point, argument.lats, argument.lngs)
