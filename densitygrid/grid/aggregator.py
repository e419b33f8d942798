"""Single-pass density aggregation over a region's building records."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Mapping, Optional

from densitygrid.common.config import AggregationConfig
from densitygrid.common.geo import GridBinner
from densitygrid.common.models import CellIndex, GridResult, SourceRecord
from densitygrid.grid.assembler import assemble

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationRules:
    """Which record attributes feed the per-cell statistics."""

    category_keyword: str = "residential"
    min_year: int = 1800
    max_year: int = field(default_factory=lambda: date.today().year)

    @classmethod
    def from_config(cls, config: AggregationConfig) -> "AggregationRules":
        return cls(
            category_keyword=config.category_keyword,
            min_year=config.min_year,
            max_year=config.resolved_max_year(),
        )

    def primary_value(self, record: SourceRecord) -> float:
        value = _as_float(record.apartments)
        return value if value is not None else 0.0

    def matches_category(self, record: SourceRecord) -> bool:
        if not record.current_use or not self.category_keyword:
            return False
        return self.category_keyword.lower() in str(record.current_use).lower()

    def valid_year(self, record: SourceRecord) -> Optional[float]:
        year = _as_float(record.construction_year)
        if year is None or not (self.min_year < year <= self.max_year):
            return None
        return year


@dataclass
class CellAccumulator:
    """Mutable running statistics for one cell while records are binned."""

    record_count: int = 0
    attribute_sum: float = 0.0
    category_count: int = 0
    running_year_average: Optional[float] = None


class CellAggregator:
    """Owns the sparse cell map for a single aggregation run."""

    def __init__(self, rules: AggregationRules) -> None:
        self.rules = rules
        self._cells: Dict[CellIndex, CellAccumulator] = {}

    @property
    def cells(self) -> Mapping[CellIndex, CellAccumulator]:
        return self._cells

    def add(self, index: CellIndex, record: SourceRecord) -> CellAccumulator:
        cell = self._cells.get(index)
        if cell is None:
            cell = CellAccumulator()
            self._cells[index] = cell

        cell.record_count += 1
        cell.attribute_sum += self.rules.primary_value(record)
        if self.rules.matches_category(record):
            cell.category_count += 1

        year = self.rules.valid_year(record)
        if year is not None:
            if cell.running_year_average is None:
                cell.running_year_average = year
            else:
                # divisor is the count after this record was added
                cell.running_year_average += (year - cell.running_year_average) / cell.record_count
        return cell

    def __len__(self) -> int:
        return len(self._cells)


class DensityGridAggregator:
    """Bins records into a GridBinner's grid and assembles the result."""

    def __init__(
        self,
        rules: Optional[AggregationRules] = None,
        progress_every: int = 10000,
    ) -> None:
        self.rules = rules or AggregationRules()
        self.progress_every = max(int(progress_every), 0)

    def run(
        self,
        region: str,
        binner: GridBinner,
        records: Iterable[SourceRecord],
        started_at: Optional[float] = None,
    ) -> GridResult:
        started_at = time.perf_counter() if started_at is None else started_at
        records = list(records)
        total = len(records)
        logger.info(
            "Binning %d records into a %dx%d grid for %s",
            total,
            binner.grid_size,
            binner.grid_size,
            region,
        )

        aggregator = CellAggregator(self.rules)
        skipped = 0
        clamped = 0
        for processed, record in enumerate(records, start=1):
            index = binner.bin(record.latitude, record.longitude)
            if index is None:
                skipped += 1
                logger.debug("Skipping record %s without usable coordinates", record.reference)
            else:
                if binner.is_clamped(record.latitude, record.longitude):
                    clamped += 1
                aggregator.add(index, record)
            if self.progress_every and processed % self.progress_every == 0:
                logger.info("Processed %d/%d records...", processed, total)

        result = assemble(
            region=region,
            binner=binner,
            cells=aggregator.cells,
            total_records=total,
            skipped_records=skipped,
            clamped_records=clamped,
            started_at=started_at,
        )
        logger.info(
            "Density grid for %s complete: %d records -> %d cells in %.1fms (max density %s)",
            region,
            total,
            result.cell_count,
            result.processing_time_ms,
            result.max_density,
        )
        return result


def _as_float(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
