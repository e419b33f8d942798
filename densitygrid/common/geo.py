"""Geospatial helpers for fixed-size density grids."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .errors import InvalidGridSizeError, UnknownRegionError
from .models import CellIndex

MIN_GRID_SIZE = 1
MAX_GRID_SIZE = 500


@dataclass(frozen=True)
class GeoBounds:
    """Rectangular lat/lng box; south < north and west < east."""

    south: float
    north: float
    west: float
    east: float

    def __post_init__(self) -> None:
        values = (self.south, self.north, self.west, self.east)
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
            raise ValueError(f"Bounds must be finite numbers, got {values}")
        if self.south >= self.north:
            raise ValueError(f"south ({self.south}) must be below north ({self.north})")
        if self.west >= self.east:
            raise ValueError(f"west ({self.west}) must be below east ({self.east})")

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    def to_dict(self) -> Dict[str, float]:
        return {
            "south": self.south,
            "north": self.north,
            "west": self.west,
            "east": self.east,
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "GeoBounds":
        try:
            return cls(
                south=float(raw["south"]),
                north=float(raw["north"]),
                west=float(raw["west"]),
                east=float(raw["east"]),
            )
        except KeyError as exc:
            raise ValueError(f"Bounds are missing the {exc.args[0]!r} edge.") from exc


DEFAULT_REGIONS: Mapping[str, GeoBounds] = MappingProxyType(
    {
        "sevilla": GeoBounds(south=37.32, north=37.45, west=-6.05, east=-5.85),
        "madrid": GeoBounds(south=40.35, north=40.50, west=-3.80, east=-3.60),
        "barcelona": GeoBounds(south=41.32, north=41.45, west=2.05, east=2.25),
    }
)


def normalize_region(name: str) -> str:
    return (name or "").strip().lower()


class BoundsRegistry:
    """Read-only lookup of named regions."""

    def __init__(self, regions: Optional[Mapping[str, GeoBounds]] = None) -> None:
        source = DEFAULT_REGIONS if regions is None else regions
        self._regions = MappingProxyType(
            {normalize_region(name): bounds for name, bounds in source.items()}
        )

    def get(self, name: str) -> GeoBounds:
        key = normalize_region(name)
        if key not in self._regions:
            raise UnknownRegionError(name, self.names())
        return self._regions[key]

    def names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._regions))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_region(name) in self._regions


def validate_grid_size(
    grid_size: object, min_size: int = MIN_GRID_SIZE, max_size: int = MAX_GRID_SIZE
) -> int:
    if isinstance(grid_size, bool) or not isinstance(grid_size, int):
        raise InvalidGridSizeError(grid_size, min_size, max_size)
    if grid_size < min_size or grid_size > max_size:
        raise InvalidGridSizeError(grid_size, min_size, max_size)
    return grid_size


class GridBinner:
    """Maps latitude/longitude pairs onto an N x N grid over fixed bounds."""

    def __init__(
        self,
        bounds: GeoBounds,
        grid_size: int,
        min_size: int = MIN_GRID_SIZE,
        max_size: int = MAX_GRID_SIZE,
    ) -> None:
        self.bounds = bounds
        self.grid_size = validate_grid_size(grid_size, min_size, max_size)
        self.lat_step = (bounds.north - bounds.south) / self.grid_size
        self.lng_step = (bounds.east - bounds.west) / self.grid_size

    def bin(self, latitude: Optional[float], longitude: Optional[float]) -> Optional[CellIndex]:
        """Return the cell for a coordinate, or None when it cannot be placed.

        Coordinates outside the bounds are clamped into the edge rows and
        columns rather than rejected.
        """

        if not _is_finite(latitude) or not _is_finite(longitude):
            return None
        x = self._index((longitude - self.bounds.west) / self.lng_step)
        y = self._index((latitude - self.bounds.south) / self.lat_step)
        return CellIndex(x=x, y=y)

    def is_clamped(self, latitude: float, longitude: float) -> bool:
        return not self.bounds.contains(latitude, longitude)

    def cell_center(self, index: CellIndex) -> Tuple[float, float]:
        center_lat = self.bounds.south + (index.y + 0.5) * self.lat_step
        center_lng = self.bounds.west + (index.x + 0.5) * self.lng_step
        return center_lat, center_lng

    def _index(self, offset: float) -> int:
        # clamp before flooring; extreme coordinates overflow the quotient to inf
        return math.floor(min(max(offset, 0.0), self.grid_size - 1))


def _is_finite(value: Optional[float]) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False
