"""Entry point for the batch density grid job."""

from __future__ import annotations

import argparse
import logging

from densitygrid.common.config import load_config
from densitygrid.common.geo import BoundsRegistry
from densitygrid.grid.aggregator import AggregationRules, DensityGridAggregator
from densitygrid.grid.persistence import Persistence
from densitygrid.grid.service import DensityGridService
from densitygrid.ingest.ingestion_service import BuildingIngestionService
from densitygrid.ingest.sources import FrameRecordSource


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Aggregate building density grids per region.")
    parser.add_argument("--config", default="config/local.yaml", help="Path to YAML config.")
    parser.add_argument(
        "--region",
        action="append",
        dest="regions",
        help="Region to aggregate (repeatable). Defaults to every configured region.",
    )
    parser.add_argument("--grid-size", type=int, default=None, help="Cells per side.")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    registry = BoundsRegistry(config.regions)
    ingestion = BuildingIngestionService(
        config.dataset.buildings_path,
        limit=config.dataset.limit,
    )
    service = DensityGridService(
        registry,
        FrameRecordSource(ingestion=ingestion),
        aggregator=DensityGridAggregator(
            AggregationRules.from_config(config.aggregation),
            progress_every=config.grid.progress_every,
        ),
        grid_config=config.grid,
    )
    persistence = Persistence(config.output.base_path)

    grid_size = args.grid_size if args.grid_size is not None else config.grid.default_size
    regions = args.regions or list(registry.names())
    # validate every region before touching the dataset
    for region in regions:
        service.prepare(region, grid_size)

    for region in regions:
        result = service.aggregate(region, grid_size)
        target = persistence.write(result)
        print(
            f"{result.region}: {result.total_records} buildings -> {result.cell_count} cells "
            f"(max density {result.max_density}) written to {target}"
        )


if __name__ == "__main__":
    main()
