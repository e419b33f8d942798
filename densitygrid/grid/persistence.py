"""Persist density grids for the map layer."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from densitygrid.common.models import GridResult

CELL_COLUMNS = [
    "x",
    "y",
    "center_lat",
    "center_lng",
    "record_count",
    "attribute_sum",
    "average_attribute",
    "category_count",
    "running_year_average",
    "density_score",
]


class Persistence:
    """Write grid results into a folder per region."""

    def __init__(self, base_path: str) -> None:
        self.base_path = Path(base_path)

    def write(self, result: GridResult) -> Path:
        target = self.base_path / result.region
        target.mkdir(parents=True, exist_ok=True)
        cells_to_frame(result).to_parquet(target / "cells.parquet", index=False)
        with open(target / "metadata.json", "w", encoding="utf-8") as handle:
            json.dump({"region": result.region, **result.metadata()}, handle, indent=2)
        return target

    def read_cells(self, region: str) -> pd.DataFrame:
        path = self.base_path / region / "cells.parquet"
        if not path.exists():
            return pd.DataFrame(columns=CELL_COLUMNS)
        return pd.read_parquet(path)


def cells_to_frame(result: GridResult) -> pd.DataFrame:
    return pd.DataFrame([cell.to_dict() for cell in result.cells], columns=CELL_COLUMNS)
