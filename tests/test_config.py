import pytest

from densitygrid.common.config import load_config
from densitygrid.common.geo import DEFAULT_REGIONS


def test_load_config_merges_regions_and_defaults(tmp_path):
    path = tmp_path / "local.yaml"
    path.write_text(
        """
dataset:
  buildings_path: ./data/buildings.jsonl
grid:
  default_region: Madrid
  default_size: 24
aggregation:
  category_keyword: housing
  max_year: 2020
regions:
  Valencia:
    south: 39.42
    north: 39.52
    west: -0.43
    east: -0.31
""",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.dataset.buildings_path == "./data/buildings.jsonl"
    assert config.grid.default_region == "madrid"
    assert config.grid.default_size == 24
    assert config.grid.max_size == 500
    assert config.aggregation.category_keyword == "housing"
    assert config.aggregation.resolved_max_year() == 2020
    assert config.regions["valencia"].north == 39.52
    assert config.regions["sevilla"] == DEFAULT_REGIONS["sevilla"]
    assert config.render.heatmap_radius == 25


def test_empty_config_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    config = load_config(path)

    assert config.grid.default_size == 40
    assert set(config.regions) == set(DEFAULT_REGIONS)


def test_non_mapping_config_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


def test_invalid_region_bounds_are_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("regions:\n  flat:\n    south: 1\n    north: 1\n    west: 0\n    east: 2\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


def test_invalid_grid_range_is_rejected(tmp_path):
    path = tmp_path / "bad_grid.yaml"
    path.write_text("grid:\n  min_size: 80\n  max_size: 16\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)
