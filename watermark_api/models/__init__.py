
from .watermark import (
    Anchor,
    DiagonalTilePlacement,
    GridPlacement,
    ImageContent,
    ImageLimits,
    OutputFormat,
    PlacementMode,
    Point,
    SinglePlacement,
    TextContent,
    WatermarkKind,
    WatermarkOptions,
    WatermarkResult,
    WatermarkSpec,
)

__all__ = [
    "Anchor",
    "DiagonalTilePlacement",
    "GridPlacement",
    "ImageContent",
    "ImageLimits",
    "OutputFormat",
    "PlacementMode",
    "Point",
    "SinglePlacement",
    "TextContent",
    "WatermarkKind",
    "WatermarkOptions",
    "WatermarkResult",
    "WatermarkSpec",
]
