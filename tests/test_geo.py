import math

import pytest

from densitygrid.common.errors import InvalidGridSizeError, UnknownRegionError
from densitygrid.common.geo import BoundsRegistry, GeoBounds, GridBinner
from densitygrid.common.models import CellIndex


def test_binner_maps_points_into_expected_cells(square_bounds):
    binner = GridBinner(square_bounds, grid_size=2)

    assert binner.bin(1, 1) == CellIndex(0, 0)
    assert binner.bin(9, 9) == CellIndex(1, 1)
    # x follows longitude, y follows latitude
    assert binner.bin(1, 9) == CellIndex(x=1, y=0)


def test_north_east_corner_lands_in_last_cell(square_bounds):
    binner = GridBinner(square_bounds, grid_size=2)

    assert binner.bin(10, 10) == CellIndex(1, 1)


def test_out_of_region_points_are_clamped_to_edges(square_bounds):
    binner = GridBinner(square_bounds, grid_size=4)

    assert binner.bin(-5, -5) == CellIndex(0, 0)
    assert binner.bin(50, -1) == CellIndex(x=0, y=3)
    assert binner.is_clamped(-5, -5)
    assert not binner.is_clamped(5, 5)


def test_invalid_coordinates_are_not_binned(square_bounds):
    binner = GridBinner(square_bounds, grid_size=4)

    assert binner.bin(None, 1) is None
    assert binner.bin(1, math.nan) is None
    assert binner.bin(math.inf, 1) is None


def test_indices_stay_inside_grid_for_many_sizes(square_bounds):
    points = [(lat / 7, lng / 3) for lat in range(-10, 90, 3) for lng in range(-5, 40, 4)]
    for grid_size in (1, 2, 3, 7, 16, 500):
        binner = GridBinner(square_bounds, grid_size=grid_size)
        for lat, lng in points:
            index = binner.bin(lat, lng)
            assert 0 <= index.x < grid_size
            assert 0 <= index.y < grid_size


@pytest.mark.parametrize("grid_size", [0, -3, 501, 2.5, "40", True])
def test_binner_rejects_bad_grid_sizes(square_bounds, grid_size):
    with pytest.raises(InvalidGridSizeError):
        GridBinner(square_bounds, grid_size=grid_size)


def test_cell_center_is_derived_from_bounds(square_bounds):
    binner = GridBinner(square_bounds, grid_size=2)

    assert binner.cell_center(CellIndex(0, 0)) == (2.5, 2.5)
    assert binner.cell_center(CellIndex(x=1, y=0)) == (2.5, 7.5)


def test_bounds_validate_edges():
    with pytest.raises(ValueError):
        GeoBounds(south=10, north=0, west=0, east=10)
    with pytest.raises(ValueError):
        GeoBounds(south=0, north=10, west=5, east=5)
    with pytest.raises(ValueError):
        GeoBounds(south=0, north=math.nan, west=0, east=10)


def test_registry_lookup_is_case_insensitive():
    registry = BoundsRegistry()

    assert registry.get(" Sevilla ") == registry.get("sevilla")
    assert "MADRID" in registry
    assert registry.names() == ("barcelona", "madrid", "sevilla")


def test_registry_unknown_region_lists_available():
    registry = BoundsRegistry({"test": GeoBounds(0, 1, 0, 1)})

    with pytest.raises(UnknownRegionError) as excinfo:
        registry.get("atlantis")

    assert "test" in str(excinfo.value)
    assert excinfo.value.available == ("test",)


def test_extreme_finite_coordinates_clamp_instead_of_overflowing():
    binner = GridBinner(BoundsRegistry().get("sevilla"), grid_size=500)

    assert binner.bin(37.4, 1e308) == CellIndex(x=499, y=binner.bin(37.4, -5.9).y)
    assert binner.bin(-1e308, -1e308) == CellIndex(0, 0)
    assert binner.bin(1.7e308, -1.7e308) == CellIndex(x=0, y=499)


def test_bounds_center(square_bounds):
    assert square_bounds.center == (5.0, 5.0)
