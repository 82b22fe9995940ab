"""
Pydantic v2 schemas for the location search API.

``SearchResultOut`` flattens the ``SearchResult`` union into one wire shape
keyed by ``kind``; ``SelectionRequest`` is the reverse mapping used when a
client sends back the candidate the user picked.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from accessmap.models import (
    Coordinate,
    PlaceResult,
    PostalCodeResult,
    SearchResult,
    ThreeWordResult,
)

ResultKind = Literal["three_word", "postal_code", "place"]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class SearchResultOut(BaseModel):
    """A single search candidate."""

    kind: ResultKind
    display_label: str
    words: Optional[str] = Field(default=None, description="what3words address (three_word only)")
    place_id: Optional[str] = Field(default=None, description="Places reference (place only)")
    lat: Optional[float] = Field(default=None, description="Latitude (postal_code only)")
    lng: Optional[float] = Field(default=None, description="Longitude (postal_code only)")

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultOut":
        if isinstance(result, ThreeWordResult):
            return cls(kind=result.kind, display_label=result.display_label, words=result.words)
        if isinstance(result, PostalCodeResult):
            return cls(
                kind=result.kind,
                display_label=result.display_label,
                lat=result.coordinate.lat,
                lng=result.coordinate.lng,
            )
        if isinstance(result, PlaceResult):
            return cls(kind=result.kind, display_label=result.display_label, place_id=result.place_ref)
        raise TypeError(f"Unsupported search result type: {type(result).__name__}")


class SearchResponse(BaseModel):
    """Candidates for a search query."""

    query: str
    kind: Optional[ResultKind] = Field(
        default=None, description="Source the query was sent to; null for an empty query"
    )
    results: list[SearchResultOut]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class SelectionRequest(BaseModel):
    """The candidate the user picked, as previously returned by /search."""

    kind: ResultKind
    display_label: str = Field(min_length=1)
    words: Optional[str] = None
    place_id: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("display_label")
    @classmethod
    def _label_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("display_label must not be blank")
        return value

    @model_validator(mode="after")
    def _check_kind_fields(self) -> "SelectionRequest":
        if self.kind == "three_word" and not self.words:
            raise ValueError("'words' is required for a three_word selection")
        if self.kind == "place" and not self.place_id:
            raise ValueError("'place_id' is required for a place selection")
        if self.kind == "postal_code" and (self.lat is None or self.lng is None):
            raise ValueError("'lat' and 'lng' are required for a postal_code selection")
        return self

    def to_result(self) -> SearchResult:
        if self.kind == "three_word":
            return ThreeWordResult(words=self.words, display_label=self.display_label)
        if self.kind == "place":
            return PlaceResult(place_ref=self.place_id, display_label=self.display_label)
        return PostalCodeResult(
            coordinate=Coordinate(lat=self.lat, lng=self.lng),
            display_label=self.display_label,
        )


class SelectionResponse(BaseModel):
    """Outcome of a selection; ``selected`` is false when it could not be resolved."""

    selected: bool
    lat: Optional[float] = None
    lng: Optional[float] = None
