from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class WatermarkKind(str, Enum):
    text = "text"
    image = "image"


class PlacementMode(str, Enum):
    single = "single"
    grid = "grid"
    diagonal_tile = "diagonal_tile"


class Anchor(str, Enum):
    top_left = "top_left"
    top_center = "top_center"
    top_right = "top_right"
    center_left = "center_left"
    center = "center"
    center_right = "center_right"
    bottom_left = "bottom_left"
    bottom_center = "bottom_center"
    bottom_right = "bottom_right"


class OutputFormat(str, Enum):
    png = "png"
    jpeg = "jpeg"
    webp = "webp"


CONTENT_TYPES = {
    OutputFormat.png: "image/png",
    OutputFormat.jpeg: "image/jpeg",
    OutputFormat.webp: "image/webp",
}


class Point(NamedTuple):
    """الزاوية العليا اليسرى التي تُرسم عندها العلامة."""

    x: int
    y: int


# ----------------------------------------------------------------------
# أنواع التوزيع
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SinglePlacement:
    position: Anchor = Anchor.bottom_right
    margin_px: int = 24


@dataclass(frozen=True)
class GridPlacement:
    spacing_px: int = 280


@dataclass(frozen=True)
class DiagonalTilePlacement:
    spacing_px: int = 280


Placement = Union[SinglePlacement, GridPlacement, DiagonalTilePlacement]


# ----------------------------------------------------------------------
# أنواع محتوى العلامة
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class TextContent:
    text: str
    font_id: str = "Roboto"
    font_size_px: int = 32
    font_weight: int = 400
    color_hex: str = "#FFFFFF"


@dataclass(frozen=True)
class ImageContent:
    overlay_bytes: Optional[bytes] = None
    scale: float = 0.2


@dataclass(frozen=True)
class WatermarkSpec:
    """كل ما يلزم لوضع علامة على صورة واحدة، ويُبنى من جديد لكل طلب."""

    content: Union[TextContent, ImageContent]
    placement: Placement
    opacity: float = 0.18
    rotation_degrees: int = -30
    output_format: OutputFormat = OutputFormat.png
    quality: int = 90

    @property
    def kind(self) -> WatermarkKind:
        if isinstance(self.content, ImageContent):
            return WatermarkKind.image
        return WatermarkKind.text


@dataclass(frozen=True)
class ImageLimits:
    max_width: int
    max_height: int


@dataclass(frozen=True)
class WatermarkResult:
    content: bytes
    content_type: str


# ----------------------------------------------------------------------
# نموذج الطلب
# ----------------------------------------------------------------------
class WatermarkOptions(BaseModel):
    type: WatermarkKind = Field(..., description="نوع العلامة: text أو image.")
    mode: PlacementMode = Field(PlacementMode.single, description="طريقة التوزيع.")
    position: Anchor = Field(Anchor.bottom_right, description="موضع العلامة في وضع single.")
    margin_px: int = Field(24, ge=0, le=500, description="المسافة عن الحواف.")
    spacing_px: int = Field(280, ge=20, le=2000, description="المسافة بين التكرارات في grid و diagonal_tile.")

    text: Optional[str] = Field(None, max_length=200, description="نص العلامة المائية.")
    font: str = Field("Roboto", max_length=64, description="معرّف الخط.")
    font_weight: int = Field(400, ge=100, le=900)
    font_size: int = Field(32, ge=8, le=512)
    color: str = Field("#FFFFFF", pattern=r"^#[0-9A-Fa-f]{6}$", description="اللون بصيغة hex مثل #FFFFFF.")

    wm_scale: float = Field(0.2, ge=0.01, le=5, description="حجم العلامة نسبةً إلى الضلع الأقصر للصورة.")
    opacity: float = Field(0.18, ge=0, le=1, description="الشفافية بين 0 و 1.")
    angle_deg: int = Field(-30, ge=-180, le=180)

    output_format: OutputFormat = OutputFormat.png
    quality: int = Field(90, ge=1, le=100)

    @field_validator("position", mode="before")
    @classmethod
    def normalize_position(cls, value):
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    @field_validator("output_format", mode="before")
    @classmethod
    def normalize_format(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return "jpeg" if value == "jpg" else value
        return value

    @model_validator(mode="after")
    def check_text_present(self) -> "WatermarkOptions":
        if self.type == WatermarkKind.text and not (self.text or "").strip():
            raise ValueError("text is required for text watermarks")
        return self

    def placement(self) -> Placement:
        if self.mode == PlacementMode.grid:
            return GridPlacement(spacing_px=self.spacing_px)
        if self.mode == PlacementMode.diagonal_tile:
            return DiagonalTilePlacement(spacing_px=self.spacing_px)
        return SinglePlacement(position=self.position, margin_px=self.margin_px)

    def to_spec(self, overlay_bytes: Optional[bytes] = None) -> WatermarkSpec:
        if self.type == WatermarkKind.image:
            content: Union[TextContent, ImageContent] = ImageContent(
                overlay_bytes=overlay_bytes,
                scale=self.wm_scale,
            )
        else:
            content = TextContent(
                text=self.text or "",
                font_id=self.font,
                font_size_px=self.font_size,
                font_weight=self.font_weight,
                color_hex=self.color,
            )

        return WatermarkSpec(
            content=content,
            placement=self.placement(),
            opacity=self.opacity,
            rotation_degrees=self.angle_deg,
            output_format=self.output_format,
            quality=self.quality,
        )
