"""Load the building density table export into pandas DataFrames."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from densitygrid.common.errors import RecordSourceError

logger = logging.getLogger(__name__)

BUILDING_COLUMNS = (
    "cadastral_ref_building",
    "latitude",
    "longitude",
    "total_apartments",
    "current_use",
    "beginning_year",
    "municipality",
)
NUMERIC_COLUMNS = ("latitude", "longitude", "total_apartments", "beginning_year")


class BuildingIngestionService:
    """Read wrapper for building_density exports (JSON lines, JSON, CSV, Parquet)."""

    def __init__(self, buildings_path: str, limit: Optional[int] = None) -> None:
        self.buildings_path = buildings_path
        self.limit = limit

    def load_buildings(self) -> pd.DataFrame:
        """Return a cleaned DataFrame with coordinates + building metadata."""

        path = Path(self.buildings_path)
        if not path.exists():
            raise RecordSourceError(f"Building dataset not found at {path}")
        try:
            df = self._read(path)
        except (ValueError, OSError) as exc:
            raise RecordSourceError(f"Could not read building dataset {path}: {exc}") from exc
        cleaned = self.clean(df)
        if self.limit:
            cleaned = cleaned.head(int(self.limit))
        logger.info("Loaded %d buildings from %s", len(cleaned), path)
        return cleaned

    @staticmethod
    def clean(df: pd.DataFrame) -> pd.DataFrame:
        cleaned = df.reindex(columns=list(BUILDING_COLUMNS)).copy()
        for column in NUMERIC_COLUMNS:
            cleaned[column] = pd.to_numeric(cleaned[column], errors="coerce")
        cleaned = cleaned.dropna(subset=["latitude", "longitude"])
        return cleaned.reset_index(drop=True)

    @staticmethod
    def _read(path: Path) -> pd.DataFrame:
        suffix = path.suffix.lower()
        if suffix in (".jsonl", ".ndjson"):
            return pd.read_json(path, lines=True)
        if suffix == ".json":
            return pd.read_json(path)
        if suffix == ".csv":
            return pd.read_csv(path)
        if suffix == ".parquet":
            return pd.read_parquet(path)
        raise ValueError(f"Unsupported dataset format: {suffix or path.name}")
