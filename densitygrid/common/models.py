"""Dataclasses shared between the ingestion, aggregation and rendering layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class SourceRecord:
    """One geolocated building row handed to the aggregator."""

    latitude: Optional[float]
    longitude: Optional[float]
    apartments: Optional[float] = None
    current_use: Optional[str] = None
    construction_year: Optional[float] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class CellIndex:
    x: int
    y: int


@dataclass(frozen=True)
class GridCell:
    """A finalized, non-empty grid square."""

    x: int
    y: int
    center_lat: float
    center_lng: float
    record_count: int
    attribute_sum: float
    average_attribute: float
    category_count: int
    running_year_average: Optional[float]
    density_score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_payload(self) -> Dict[str, Any]:
        """Cell in the camelCase shape the map layer reads."""

        return {
            "x": self.x,
            "y": self.y,
            "centerLat": self.center_lat,
            "centerLng": self.center_lng,
            "recordCount": self.record_count,
            "attributeSum": self.attribute_sum,
            "averageAttribute": self.average_attribute,
            "categoryCount": self.category_count,
            "runningYearAverage": self.running_year_average,
            "densityScore": self.density_score,
        }


@dataclass(frozen=True)
class GridResult:
    """Output of one aggregation run, cells sorted by density score."""

    region: str
    bounds: Dict[str, float]
    grid_size: int
    cells: Tuple[GridCell, ...]
    total_records: int
    max_density: float
    processing_time_ms: float
    skipped_records: int = 0
    clamped_records: int = 0

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    def metadata(self) -> Dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "gridSize": self.grid_size,
            "cellCount": self.cell_count,
            "maxDensity": self.max_density,
            "processingTimeMs": self.processing_time_ms,
            "bounds": dict(self.bounds),
            "skippedRecords": self.skipped_records,
            "clampedRecords": self.clamped_records,
        }

    def to_payload(self) -> Dict[str, Any]:
        """Response body consumed by the map layer."""

        return {
            "success": True,
            "region": self.region,
            "cells": [cell.to_payload() for cell in self.cells],
            "metadata": self.metadata(),
        }
