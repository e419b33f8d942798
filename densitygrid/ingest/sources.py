"""Record sources that feed the density aggregator."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Protocol

import pandas as pd

from densitygrid.common.geo import GeoBounds
from densitygrid.common.models import SourceRecord
from densitygrid.ingest.ingestion_service import BuildingIngestionService


class RecordSource(Protocol):
    def fetch_records(self, bounds: GeoBounds) -> List[SourceRecord]:
        ...


class StaticRecordSource:
    """In-memory records, filtered to the requested bounds."""

    def __init__(self, records: Iterable[SourceRecord]) -> None:
        self.records = tuple(records)

    def fetch_records(self, bounds: GeoBounds) -> List[SourceRecord]:
        return [
            record
            for record in self.records
            if record.latitude is not None
            and record.longitude is not None
            and bounds.contains(record.latitude, record.longitude)
        ]


class FrameRecordSource:
    """Serves records from a building DataFrame, loading it lazily once."""

    def __init__(
        self,
        frame: Optional[pd.DataFrame] = None,
        ingestion: Optional[BuildingIngestionService] = None,
    ) -> None:
        if frame is None and ingestion is None:
            raise ValueError("FrameRecordSource needs a DataFrame or an ingestion service.")
        self._frame = BuildingIngestionService.clean(frame) if frame is not None else None
        self.ingestion = ingestion

    @property
    def frame(self) -> pd.DataFrame:
        if self._frame is None:
            self._frame = self.ingestion.load_buildings()
        return self._frame

    def fetch_records(self, bounds: GeoBounds) -> List[SourceRecord]:
        frame = self.frame
        in_bounds = frame[
            frame["latitude"].between(bounds.south, bounds.north)
            & frame["longitude"].between(bounds.west, bounds.east)
        ]
        return [_to_record(row) for row in in_bounds.to_dict(orient="records")]


def _to_record(row: dict) -> SourceRecord:
    return SourceRecord(
        latitude=_clean(row.get("latitude")),
        longitude=_clean(row.get("longitude")),
        apartments=_clean(row.get("total_apartments")),
        current_use=_clean_text(row.get("current_use")),
        construction_year=_clean(row.get("beginning_year")),
        reference=_clean_text(row.get("cadastral_ref_building")),
    )


def _clean(value) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _clean_text(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return str(value)
