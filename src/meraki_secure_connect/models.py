from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegionType(str, Enum):
    CNHE = "CNHE"
    CLOUD_HUB = "CloudHub"


class SiteEnrollment(BaseModel):
    """One entry of the `enrollments` array sent on create."""

    site_id: str = Field(alias="siteId", min_length=1)
    region_type: RegionType = Field(alias="regionType")
    region_id: Optional[str] = Field(default=None, alias="regionId")
    region_name: Optional[str] = Field(default=None, alias="regionName")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("region_id", "region_name", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SiteRecord(BaseModel):
    """
    A site as returned by the list endpoint.

    Only id, name and region are modelled; anything else the server sends is
    kept as-is in `extras` so newer fields survive a round trip.
    """

    id: str
    name: Optional[str] = None
    region: Any = None

    model_config = ConfigDict(extra="allow")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


# --- Page decoding --------------------------------------------------------- #


class PageShape(str, Enum):
    WRAPPED = "wrapped"  # {"data": [...]}
    BARE = "bare"  # [...]


@dataclass(frozen=True)
class SitePage:
    shape: PageShape
    records: List[SiteRecord]


def _records_or_none(value: Any) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, dict) for item in value):
        return None
    return value


def _decode_wrapped(payload: Any) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(payload, dict) or "data" not in payload:
        return None
    return _records_or_none(payload["data"])


def _decode_bare(payload: Any) -> Optional[List[Dict[str, Any]]]:
    return _records_or_none(payload)


# Tried in order; the first decoder that returns a list wins.
PAGE_DECODERS: Tuple[
    Tuple[PageShape, Callable[[Any], Optional[List[Dict[str, Any]]]]], ...
] = (
    (PageShape.WRAPPED, _decode_wrapped),
    (PageShape.BARE, _decode_bare),
)


def decode_site_page(body: bytes | str) -> Optional[SitePage]:
    """
    Decode one list response body.

    Returns None when the body is not JSON or matches no known shape.
    Raises pydantic.ValidationError if a record lacks a usable id.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return None

    for shape, decoder in PAGE_DECODERS:
        items = decoder(payload)
        if items is None:
            continue
        return SitePage(
            shape=shape, records=[SiteRecord.model_validate(i) for i in items]
        )
    return None
