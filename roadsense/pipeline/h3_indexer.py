"""Map coordinates to H3 hexagonal cells and back at a fixed resolution.

Resolution 9  → average hexagon edge length ≈ 174 m (engine default).
Resolution 11 → average hexagon edge length ≈ 25 m (service default).

Conversion failures never fall through to a guessed id: anything the H3
library rejects (or that is not a finite WGS84 coordinate to begin with)
surfaces as a GridIndexError naming the offending input.
"""

import math

import h3

from roadsense.core.errors import GridIndexError


H3_RESOLUTION = 9


class GridIndexer:
    """Coordinate ⇄ cell-id conversion at one resolution."""

    def __init__(self, resolution: int = H3_RESOLUTION) -> None:
        if not 0 <= resolution <= 15:
            raise GridIndexError(f"H3 resolution must be in 0..15, got {resolution}", value=resolution)
        self.resolution = resolution

    def cell_for(self, lat: float, lng: float) -> str:
        """Return the H3 cell containing (lat, lng)."""
        if not (_is_finite(lat) and _is_finite(lng)) or not (-90 <= lat <= 90 and -180 <= lng <= 180):
            raise GridIndexError(f"Invalid coordinate ({lat}, {lng})", value=(lat, lng))
        try:
            return h3.latlng_to_cell(lat, lng, self.resolution)
        except (h3.H3BaseException, ValueError, TypeError) as exc:
            raise GridIndexError(
                f"h3.latlng_to_cell failed for ({lat}, {lng}) at res {self.resolution}: {exc}",
                value=(lat, lng),
            ) from exc

    def latlng_for(self, cell: str) -> tuple[float, float]:
        """Return the centroid (lat, lng) of an H3 cell."""
        try:
            valid = h3.is_valid_cell(cell)
        except (h3.H3BaseException, ValueError, TypeError) as exc:
            raise GridIndexError(f"Invalid H3 cell index: {cell!r}", value=cell) from exc
        if not valid:
            raise GridIndexError(f"Invalid H3 cell index: {cell!r}", value=cell)
        return h3.cell_to_latlng(cell)

    def is_valid(self, cell: str) -> bool:
        try:
            return bool(h3.is_valid_cell(cell))
        except (h3.H3BaseException, ValueError, TypeError):
            return False


def _is_finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)
