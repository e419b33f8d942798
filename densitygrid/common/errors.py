"""Error taxonomy for density grid requests."""

from __future__ import annotations


class DensityGridError(Exception):
    """Base class for every error raised by the density grid package."""


class ConfigurationError(DensityGridError, ValueError):
    """Request or config is invalid; raised before any records are fetched."""


class UnknownRegionError(ConfigurationError):
    def __init__(self, name: str, available: tuple[str, ...]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f"Unsupported region '{name}'. Available: {', '.join(available)}"
        )


class InvalidGridSizeError(ConfigurationError):
    def __init__(self, grid_size: object, min_size: int, max_size: int) -> None:
        self.grid_size = grid_size
        self.min_size = min_size
        self.max_size = max_size
        super().__init__(
            f"gridSize must be an integer between {min_size} and {max_size}, got {grid_size!r}"
        )


class RecordSourceError(DensityGridError, RuntimeError):
    """The record source could not supply rows."""
