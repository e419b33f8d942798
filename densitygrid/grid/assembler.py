"""Turn the sparse cell map into a sorted, immutable grid result."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, List, Mapping

from densitygrid.common.geo import GridBinner
from densitygrid.common.models import CellIndex, GridCell, GridResult

if TYPE_CHECKING:
    from densitygrid.grid.aggregator import CellAccumulator


def finalize_cell(index: CellIndex, cell: "CellAccumulator", binner: GridBinner) -> GridCell:
    center_lat, center_lng = binner.cell_center(index)
    average = round(cell.attribute_sum / cell.record_count, 1) if cell.record_count else 0.0
    return GridCell(
        x=index.x,
        y=index.y,
        center_lat=center_lat,
        center_lng=center_lng,
        record_count=cell.record_count,
        attribute_sum=cell.attribute_sum,
        average_attribute=average,
        category_count=cell.category_count,
        running_year_average=cell.running_year_average,
        # heatmap weight is the summed attribute, not the raw record count
        density_score=cell.attribute_sum,
    )


def assemble(
    region: str,
    binner: GridBinner,
    cells: Mapping[CellIndex, "CellAccumulator"],
    total_records: int,
    skipped_records: int = 0,
    clamped_records: int = 0,
    started_at: float | None = None,
) -> GridResult:
    finalized: List[GridCell] = [
        finalize_cell(index, cell, binner) for index, cell in cells.items()
    ]
    finalized.sort(key=lambda cell: cell.density_score, reverse=True)
    max_density = finalized[0].density_score if finalized else 0
    elapsed_ms = (time.perf_counter() - started_at) * 1000 if started_at is not None else 0.0
    return GridResult(
        region=region,
        bounds=binner.bounds.to_dict(),
        grid_size=binner.grid_size,
        cells=tuple(finalized),
        total_records=total_records,
        max_density=max_density,
        processing_time_ms=round(elapsed_ms, 3),
        skipped_records=skipped_records,
        clamped_records=clamped_records,
    )
