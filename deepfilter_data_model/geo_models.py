from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from deepfilter_exception_model.exception import GeospatialError

GeoModelT = TypeVar("GeoModelT", bound=BaseModel)


class GeoPoint(BaseModel):
    """A WGS84 coordinate in decimal degrees."""
    lat: float = Field(..., ge=-90, le=90, strict=True, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, strict=True, description="Longitude")

    model_config = ConfigDict(frozen=True, from_attributes=True)


class NearQuery(BaseModel):
    """Argument of ``$near``: a distance band around ``center``."""
    center: GeoPoint
    max_distance_meters: float = Field(..., ge=0, alias="maxDistanceMeters")
    min_distance_meters: Optional[float] = Field(default=None, ge=0, alias="minDistanceMeters")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @model_validator(mode="after")
    def _check_band(self) -> "NearQuery":
        if self.min_distance_meters is not None and self.min_distance_meters > self.max_distance_meters:
            raise ValueError("minDistanceMeters must not exceed maxDistanceMeters")
        return self


class BoundingBox(BaseModel):
    """Argument of ``$geoBox``. A box whose southwest longitude is east of its
    northeast longitude crosses the antimeridian."""
    southwest: GeoPoint
    northeast: GeoPoint

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_latitudes(self) -> "BoundingBox":
        if self.southwest.lat > self.northeast.lat:
            raise ValueError("southwest latitude must not exceed northeast latitude")
        return self

    @property
    def crosses_antimeridian(self) -> bool:
        return self.southwest.lng > self.northeast.lng


class PolygonQuery(BaseModel):
    """Argument of ``$geoPolygon``: the polygon vertices in order."""
    points: List[GeoPoint] = Field(..., min_length=3)

    model_config = ConfigDict(frozen=True, extra="forbid")


def parse_geo_argument(model: Type[GeoModelT], operator: str, value: Any) -> GeoModelT:
    """
    Validate a geospatial operator argument into its model.

    Raises:
        GeospatialError: if the argument is not a well-formed point, box or polygon.
    """
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{where}: {first.get('msg')}" if where else first.get("msg")
        raise GeospatialError(f"Malformed {operator} argument: {detail}", operator, value) from e
