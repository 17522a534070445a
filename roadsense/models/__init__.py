from roadsense.models.schemas import (
    BoundingBox,
    Cell,
    CellStatistics,
    RainIntensity,
    RawEvent,
    RiskHotspot,
    RiskType,
    RoadCondition,
    StatisticsUpdate,
)

__all__ = [
    "BoundingBox",
    "Cell",
    "CellStatistics",
    "RainIntensity",
    "RawEvent",
    "RiskHotspot",
    "RiskType",
    "RoadCondition",
    "StatisticsUpdate",
]
