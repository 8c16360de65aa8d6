"""Pydantic models describing Google Maps Platform web service payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class GoogleMapsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LatLng(GoogleMapsBaseModel):
    lat: float
    lng: float


class Geometry(GoogleMapsBaseModel):
    location: LatLng


class PlaceResult(GoogleMapsBaseModel):
    """A text search or geocoding result; both share this shape."""

    place_id: str | None = None
    name: str | None = None
    formatted_address: str | None = None
    geometry: Geometry | None = None
    types: list[str] = Field(default_factory=list[str])

    @field_validator("name", "formatted_address", mode="before")
    @classmethod
    def _normalize_text(cls, value: object) -> object:
        return _blank_to_none(value)


class StatusResponse(GoogleMapsBaseModel):
    status: str
    error_message: str | None = None


class SearchResponse(StatusResponse):
    results: list[PlaceResult] = Field(default_factory=list["PlaceResult"])


class PlaceDetailsResult(GoogleMapsBaseModel):
    place_id: str | None = None
    name: str | None = None
    formatted_address: str | None = None
    formatted_phone_number: str | None = None
    website: str | None = None
    geometry: Geometry | None = None
    types: list[str] = Field(default_factory=list[str])

    @field_validator(
        "name", "formatted_address", "formatted_phone_number", "website", mode="before"
    )
    @classmethod
    def _normalize_text(cls, value: object) -> object:
        return _blank_to_none(value)


class PlaceDetailsResponse(StatusResponse):
    result: PlaceDetailsResult | None = None


class TextValue(GoogleMapsBaseModel):
    text: str
    value: int | None = None


class RouteLeg(GoogleMapsBaseModel):
    distance: TextValue
    duration: TextValue
    start_address: str | None = None
    end_address: str | None = None


class DirectionsRoute(GoogleMapsBaseModel):
    legs: list[RouteLeg] = Field(default_factory=list["RouteLeg"])
    summary: str | None = None


class DirectionsResponse(StatusResponse):
    routes: list[DirectionsRoute] = Field(default_factory=list["DirectionsRoute"])
