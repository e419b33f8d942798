"""Configuration helpers for the density grid dashboard backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .geo import DEFAULT_REGIONS, MAX_GRID_SIZE, MIN_GRID_SIZE, GeoBounds, normalize_region


@dataclass(frozen=True)
class DatasetConfig:
    """Path to the building density table export."""

    buildings_path: str = "./data/building_density.jsonl"
    limit: Optional[int] = None


@dataclass(frozen=True)
class GridConfig:
    """Grid defaults and the accepted gridSize range."""

    default_region: str = "sevilla"
    default_size: int = 40
    min_size: int = MIN_GRID_SIZE
    max_size: int = MAX_GRID_SIZE
    progress_every: int = 10000


@dataclass(frozen=True)
class AggregationConfig:
    """Rules applied to every building while it is binned."""

    category_keyword: str = "residential"
    min_year: int = 1800
    max_year: Optional[int] = None  # defaults to the current year

    def resolved_max_year(self) -> int:
        return self.max_year if self.max_year is not None else date.today().year


@dataclass(frozen=True)
class OutputConfig:
    """Where the batch job writes grid results."""

    base_path: str = "./data/output"


@dataclass(frozen=True)
class RenderConfig:
    """Map layer defaults."""

    heatmap_radius: int = 25
    heatmap_opacity: float = 0.5
    elevation_scale: float = 4.0


@dataclass(frozen=True)
class AppConfig:
    """Aggregated configuration model."""

    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    regions: Mapping[str, GeoBounds] = field(default_factory=lambda: dict(DEFAULT_REGIONS))


def load_config(path: str | Path) -> AppConfig:
    """Parse a YAML config file into an AppConfig dataclass."""

    raw = _load_yaml(path)
    dataset_cfg = raw.get("dataset", {})
    grid_cfg = raw.get("grid", {})
    aggregation_cfg = raw.get("aggregation", {})
    output_cfg = raw.get("output", {})
    render_cfg = raw.get("render", {})

    dataset = DatasetConfig(
        buildings_path=str(dataset_cfg.get("buildings_path", "./data/building_density.jsonl")),
        limit=dataset_cfg.get("limit"),
    )
    grid = GridConfig(
        default_region=normalize_region(str(grid_cfg.get("default_region", "sevilla"))),
        default_size=int(grid_cfg.get("default_size", 40)),
        min_size=int(grid_cfg.get("min_size", MIN_GRID_SIZE)),
        max_size=int(grid_cfg.get("max_size", MAX_GRID_SIZE)),
        progress_every=int(grid_cfg.get("progress_every", 10000)),
    )
    if grid.min_size < 1 or grid.min_size > grid.max_size:
        raise ValueError(
            f"grid.min_size ({grid.min_size}) must be >= 1 and <= grid.max_size ({grid.max_size})."
        )
    max_year = aggregation_cfg.get("max_year")
    aggregation = AggregationConfig(
        category_keyword=str(aggregation_cfg.get("category_keyword", "residential")),
        min_year=int(aggregation_cfg.get("min_year", 1800)),
        max_year=int(max_year) if max_year is not None else None,
    )
    output = OutputConfig(base_path=str(output_cfg.get("base_path", "./data/output")))
    render = RenderConfig(
        heatmap_radius=int(render_cfg.get("heatmap_radius", 25)),
        heatmap_opacity=float(render_cfg.get("heatmap_opacity", 0.5)),
        elevation_scale=float(render_cfg.get("elevation_scale", 4.0)),
    )
    return AppConfig(
        dataset=dataset,
        grid=grid,
        aggregation=aggregation,
        output=output,
        render=render,
        regions=_load_regions(raw.get("regions", {})),
    )


def _load_regions(raw_regions: Any) -> Dict[str, GeoBounds]:
    if not isinstance(raw_regions, dict):
        raise ValueError("regions must be a mapping of name -> {south, north, west, east}.")
    regions = dict(DEFAULT_REGIONS)
    for name, raw_bounds in raw_regions.items():
        if not isinstance(raw_bounds, dict):
            raise ValueError(f"Region {name} must define south/north/west/east.")
        regions[normalize_region(str(name))] = GeoBounds.from_mapping(raw_bounds)
    return regions


def _load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a top-level mapping.")
    return data
