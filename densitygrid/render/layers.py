"""pydeck layers that paint a density grid on the map."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pydeck as pdk

from densitygrid.common.config import RenderConfig
from densitygrid.common.geo import GeoBounds
from densitygrid.common.models import GridResult


def layer_data(result: GridResult) -> List[Dict[str, Any]]:
    """Cells as plain records, already in density order."""

    return [cell.to_dict() for cell in result.cells]


def heatmap_layer(result: GridResult, render: Optional[RenderConfig] = None) -> pdk.Layer:
    render = render or RenderConfig()
    return pdk.Layer(
        "HeatmapLayer",
        data=layer_data(result),
        id=f"{result.region}-density-heatmap",
        get_position="[center_lng, center_lat]",
        get_weight="density_score",
        radius_pixels=render.heatmap_radius,
        opacity=render.heatmap_opacity,
        pickable=False,
    )


def column_layer(result: GridResult, render: Optional[RenderConfig] = None) -> pdk.Layer:
    render = render or RenderConfig()
    lat_span = result.bounds["north"] - result.bounds["south"]
    # rough metres per cell edge, half of it as the column radius
    radius = max(lat_span / max(result.grid_size, 1) * 111_000 / 2, 1.0)
    return pdk.Layer(
        "ColumnLayer",
        data=layer_data(result),
        id=f"{result.region}-density-columns",
        get_position="[center_lng, center_lat]",
        get_elevation="density_score",
        elevation_scale=render.elevation_scale,
        radius=radius,
        get_fill_color="[255, 140, 60, 180]",
        auto_highlight=True,
        pickable=True,
    )


def build_deck(
    result: GridResult,
    render: Optional[RenderConfig] = None,
    columns: bool = False,
) -> pdk.Deck:
    center_lat, center_lng = GeoBounds.from_mapping(result.bounds).center
    layers = [heatmap_layer(result, render)]
    if columns:
        layers.append(column_layer(result, render))
    tooltip = {
        "text": "Buildings: {record_count}\nApartments: {attribute_sum}\nAvg year: {running_year_average}"
    }
    return pdk.Deck(
        initial_view_state=pdk.ViewState(
            latitude=center_lat,
            longitude=center_lng,
            zoom=11,
            pitch=40 if columns else 0,
        ),
        layers=layers,
        tooltip=tooltip,
    )
