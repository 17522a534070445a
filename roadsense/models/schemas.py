"""Pydantic schemas for weather cells, cell statistics and road-risk hotspots.

Field names, nesting and enumeration values are the external JSON contract
consumed by map clients; do not rename them.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from roadsense.core.errors import InvalidBoundingBoxError


# ── Enums ─────────────────────────────────────────────────────────────────────


class RainIntensity(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    UNRECOGNIZED = "UNRECOGNIZED"


class RoadCondition(str, Enum):
    DRY = "DRY"
    WET = "WET"
    SLIPPERY = "SLIPPERY"
    SLIPPERY_ICE = "SLIPPERY_ICE"
    SLIPPERY_WET = "SLIPPERY_WET"
    UNRECOGNIZED = "UNRECOGNIZED"


class RiskType(str, Enum):
    BDV = "BDV"
    VA = "VA"
    GW = "GW"
    HL = "HL"
    SR = "SR"
    FOG = "FOG"
    HR = "HR"
    EB = "EB"
    CW = "CW"
    PH = "PH"
    BUM = "BUM"


WEEKDAY_CODES: tuple[str, ...] = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")


def isoformat_z(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _Frozen(BaseModel):
    model_config = {"frozen": True}


# ── Bounding box ──────────────────────────────────────────────────────────────


class BoundingBox(_Frozen):
    """Inclusive lng/lat rectangle, wire order ``minLng,minLat,maxLng,maxLat``."""

    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    @classmethod
    def parse(cls, value: str | Sequence[Any]) -> BoundingBox:
        """Build a bbox from its wire string or a 4-item sequence.

        Raises:
            InvalidBoundingBoxError: wrong arity or a non-numeric / non-finite part.
        """
        parts = split_list(value) if isinstance(value, str) else list(value)
        if len(parts) != 4:
            raise InvalidBoundingBoxError("bbox must contain exactly 4 coordinates")

        numbers: list[float] = []
        for part in parts:
            try:
                number = float(part)
            except (TypeError, ValueError):
                raise InvalidBoundingBoxError("bbox must contain only valid numbers") from None
            if not math.isfinite(number):
                raise InvalidBoundingBoxError("bbox must contain only valid numbers")
            numbers.append(number)

        min_lng, min_lat, max_lng, max_lat = numbers
        return cls(min_lng=min_lng, min_lat=min_lat, max_lng=max_lng, max_lat=max_lat)

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


def split_list(value: str, delimiter: str = ",") -> list[str]:
    """Split a delimited query value, trimming parts and dropping empty ones."""
    return [part.strip() for part in value.split(delimiter) if part.strip()]


# ── Weather cell ──────────────────────────────────────────────────────────────


class CellLocation(_Frozen):
    h3_index: str


class CellTimeframe(_Frozen):
    last: str


class CellMetadata(_Frozen):
    confidence: int = Field(ge=0, le=100)
    total_count: int = Field(ge=1)


class CellConditions(_Frozen):
    rain_intensity: RainIntensity
    road_condition: RoadCondition
    fog: bool
    cross_wind: bool


class CellEnvironment(_Frozen):
    temperature: float
    is_night: bool
    conditions: CellConditions


class TemperatureReading(_Frozen):
    value: float
    timestamp: str


class TemperatureExtremes(_Frozen):
    lowest: TemperatureReading | None
    highest: TemperatureReading | None


class RainDays(_Frozen):
    low: int
    medium: int
    high: int


class DayCounts(_Frozen):
    rain: RainDays
    slippery_road: int
    fog: int
    cross_wind: int


class CellStatistics(_Frozen):
    temperature: TemperatureExtremes
    day_counts: DayCounts


class Cell(_Frozen):
    location: CellLocation
    timeframe: CellTimeframe
    metadata: CellMetadata
    environment: CellEnvironment
    statistics: CellStatistics | None = None

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict; ``statistics`` only appears when attached."""
        data = self.model_dump(mode="json")
        if self.statistics is None:
            data.pop("statistics")
        return data


# ── Ingestion payloads ────────────────────────────────────────────────────────


class RawEvent(BaseModel):
    """One observation pushed into a cell's accumulator.

    Only ``temperature`` is required; everything else falls back to the
    documented defaults, whether omitted or sent as null, so ingestion is
    never rejected for a missing field.
    """

    temperature: float
    confidence: float = 80
    count: float = 1
    fog: bool = False
    cross_wind: bool = False
    rain_intensity: RainIntensity = RainIntensity.NONE
    road_condition: RoadCondition = RoadCondition.DRY
    timestamp: datetime | None = Field(default=None, description="Defaults to now (UTC)")

    @field_validator(
        "confidence", "count", "fog", "cross_wind", "rain_intensity", "road_condition",
        mode="before",
    )
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class TemperatureExtremesUpdate(BaseModel):
    lowest: TemperatureReading | None = None
    highest: TemperatureReading | None = None


class RainDaysUpdate(BaseModel):
    low: int | None = None
    medium: int | None = None
    high: int | None = None


class DayCountsUpdate(BaseModel):
    rain: RainDaysUpdate | None = None
    slippery_road: int | None = None
    fog: int | None = None
    cross_wind: int | None = None


class StatisticsUpdate(BaseModel):
    """Partial CellStatistics; omitted (or null) fields keep their stored value."""

    temperature: TemperatureExtremesUpdate | None = None
    day_counts: DayCountsUpdate | None = None


# ── Road-risk hotspot ─────────────────────────────────────────────────────────


class HotspotLocation(_Frozen):
    latitude: float
    longitude: float
    std_dev: float


class RiskClassification(_Frozen):
    type: RiskType
    importance: int = Field(ge=1, le=5)
    confidence: int = Field(ge=0, le=100)
    residual_confidence: int = Field(ge=0, le=100)


class HotspotMetadata(_Frozen):
    id: str
    risk: RiskClassification
    total_count: int = Field(ge=1)
    weather_impact: int = Field(ge=1, le=5)
    time_of_day_impact: int = Field(ge=1, le=5)


class HotspotTimeframe(_Frozen):
    first: str
    last: str


class MeanSpread(_Frozen):
    avg: float
    std_dev: float


class VehicleStats(_Frozen):
    heading: MeanSpread


class ConditionPresence(_Frozen):
    is_present: bool
    count: int = Field(ge=0)

    @classmethod
    def of(cls, count: int) -> ConditionPresence:
        return cls(is_present=count > 0, count=count)


class HotspotConditions(_Frozen):
    dry_road: ConditionPresence
    wet_road: ConditionPresence
    rain: ConditionPresence
    slippery_road: ConditionPresence
    fog: ConditionPresence
    crosswind: ConditionPresence


class HotspotEnvironment(_Frozen):
    air_temperature: MeanSpread
    sun_position: MeanSpread
    conditions: HotspotConditions


class TemporalDistribution(_Frozen):
    by_week: dict[int, int]
    by_day: dict[str, int]
    by_time: dict[str, int]


class HotspotStatistics(_Frozen):
    distribution: TemporalDistribution


class RiskHotspot(_Frozen):
    location: HotspotLocation
    metadata: HotspotMetadata
    timeframe: HotspotTimeframe
    vehicle: VehicleStats
    environment: HotspotEnvironment
    statistics: HotspotStatistics
