"""Request handling for density grid lookups."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from densitygrid.common.config import GridConfig
from densitygrid.common.errors import ConfigurationError, InvalidGridSizeError
from densitygrid.common.geo import BoundsRegistry, GridBinner, normalize_region
from densitygrid.common.models import GridResult
from densitygrid.grid.aggregator import DensityGridAggregator
from densitygrid.ingest.sources import RecordSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DensityGridRequest:
    region: str
    grid_size: Any

    @classmethod
    def from_params(
        cls, params: Mapping[str, Any], defaults: Optional[GridConfig] = None
    ) -> "DensityGridRequest":
        """Build a request from query-string style parameters."""

        defaults = defaults or GridConfig()
        region = params.get("region") or params.get("city") or defaults.default_region
        raw_size = params.get("gridSize", params.get("grid_size"))
        return cls(region=normalize_region(str(region)), grid_size=_parse_grid_size(raw_size, defaults))


@dataclass(frozen=True)
class DensityGridResponse:
    status: int
    payload: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class DensityGridService:
    """Validates requests, fetches a region's records and aggregates them."""

    def __init__(
        self,
        registry: BoundsRegistry,
        source: RecordSource,
        aggregator: Optional[DensityGridAggregator] = None,
        grid_config: Optional[GridConfig] = None,
    ) -> None:
        self.registry = registry
        self.source = source
        self.grid_config = grid_config or GridConfig()
        self.aggregator = aggregator or DensityGridAggregator(
            progress_every=self.grid_config.progress_every
        )

    def prepare(self, region: str, grid_size: Any) -> GridBinner:
        """Resolve the region and validate the grid size; no records are read."""

        bounds = self.registry.get(region)
        return GridBinner(
            bounds,
            grid_size,
            min_size=self.grid_config.min_size,
            max_size=self.grid_config.max_size,
        )

    def aggregate(self, region: str, grid_size: Any) -> GridResult:
        started_at = time.perf_counter()
        region = normalize_region(region)
        binner = self.prepare(region, grid_size)
        logger.info("Loading records for %s", region)
        records = self.source.fetch_records(binner.bounds)
        return self.aggregator.run(region, binner, records, started_at=started_at)

    def handle(self, request: DensityGridRequest) -> DensityGridResponse:
        started_at = time.perf_counter()
        region = normalize_region(request.region)
        try:
            binner = self.prepare(region, request.grid_size)
        except ConfigurationError as exc:
            logger.warning("Rejected density grid request: %s", exc)
            return DensityGridResponse(status=400, payload={"error": str(exc)})

        try:
            records = self.source.fetch_records(binner.bounds)
        except Exception as exc:
            logger.exception("Loading records failed for %s", region)
            return DensityGridResponse(
                status=502, payload={"error": f"Record source failed: {exc}"}
            )

        result = self.aggregator.run(region, binner, records, started_at=started_at)
        return DensityGridResponse(status=200, payload=result.to_payload())

    def handle_params(self, params: Mapping[str, Any]) -> DensityGridResponse:
        try:
            request = DensityGridRequest.from_params(params, self.grid_config)
        except ConfigurationError as exc:
            return DensityGridResponse(status=400, payload={"error": str(exc)})
        return self.handle(request)


def _parse_grid_size(raw: Any, defaults: GridConfig) -> int:
    if raw is None or raw == "":
        return defaults.default_size
    if isinstance(raw, bool):
        raise InvalidGridSizeError(raw, defaults.min_size, defaults.max_size)
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise InvalidGridSizeError(raw, defaults.min_size, defaults.max_size) from exc
