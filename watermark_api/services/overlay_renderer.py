from __future__ import annotations

import math
import re
import unicodedata
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from watermark_api.core.config import get_settings
from watermark_api.core.errors import InvalidWatermarkImage, ProcessingError, WatermarkError
from watermark_api.models.watermark import ImageContent, TextContent, WatermarkSpec
from watermark_api.services.fonts import FontTable
from watermark_api.services.raster_codec import RasterCodec

_HEX_COLOR_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def hex_to_rgb(color_hex: str) -> Tuple[int, int, int]:
    """تحويل ``#RRGGBB`` إلى ثلاثية RGB، والقيم غير الصالحة تصبح أبيض."""
    match = _HEX_COLOR_RE.match(color_hex.strip())
    if not match:
        return (255, 255, 255)
    value = match.group(1)
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def clean_text(text: str) -> str:
    """دمج المسافات في مسافة واحدة وحذف محارف التحكم."""
    collapsed = " ".join(text.split())
    return "".join(ch for ch in collapsed if unicodedata.category(ch) != "Cc")


def overlay_bound(target_width: int, target_height: int) -> int:
    """أقصى طول لضلع العلامة قبل التدوير: قطر الصورة الهدف."""
    return max(1, math.ceil(math.hypot(target_width, target_height)))


class OverlayRenderer:
    """
    بناء صورة العلامة المائية (RGBA) التي تُطبع فوق الصورة الأصلية.

    الشفافية والتدوير يُدمجان في الصورة الناتجة، ولا يزيد أي ضلع منها قبل
    التدوير عن قطر الصورة الهدف.
    """

    def __init__(
        self,
        codec: Optional[RasterCodec] = None,
        fonts: Optional[FontTable] = None,
        allow_upscale: Optional[bool] = None,
    ) -> None:
        settings = get_settings()
        self.codec = codec or RasterCodec()
        self.fonts = fonts or FontTable(settings.fonts_dir)
        self.allow_upscale = settings.allow_watermark_upscale if allow_upscale is None else allow_upscale

    def render(self, spec: WatermarkSpec, target_width: int, target_height: int) -> Image.Image:
        bound = overlay_bound(target_width, target_height)
        try:
            if isinstance(spec.content, ImageContent):
                overlay = self._render_image(spec.content, target_width, target_height, bound)
            else:
                overlay = self._render_text(spec.content, bound)

            overlay = self.codec.apply_opacity(overlay, spec.opacity)
            return self.codec.rotate(overlay, spec.rotation_degrees)
        except WatermarkError:
            raise
        except (OSError, ValueError, MemoryError, Image.DecompressionBombError) as exc:
            raise ProcessingError(f"Failed to render watermark: {exc}") from exc

    # ------------------------------------------------------------------
    # نص
    # ------------------------------------------------------------------
    def _render_text(self, content: TextContent, bound: int) -> Image.Image:
        text = clean_text(content.text)
        size = content.font_size_px
        resolved = self.fonts.load(content.font_id, size, content.font_weight)
        stroke = max(1, size // 32) if resolved.synthetic_bold else 0

        measure = ImageDraw.Draw(Image.new("RGBA", (1, 1), (0, 0, 0, 0)))
        left, top, right, bottom = measure.textbbox((0, 0), text, font=resolved.font, stroke_width=stroke)

        pad = max(2, size // 8)
        full_width = int(right - left) + pad * 2
        full_height = int(bottom - top) + pad * 2

        # النص الأطول من القطر يُقص من المنتصف
        width = min(full_width, bound)
        height = min(full_height, bound)
        origin = (
            pad - left - (full_width - width) // 2,
            pad - top - (full_height - height) // 2,
        )

        canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        fill = (*hex_to_rgb(content.color_hex), 255)
        ImageDraw.Draw(canvas).text(
            origin,
            text,
            font=resolved.font,
            fill=fill,
            stroke_width=stroke,
            stroke_fill=fill,
        )
        return canvas

    # ------------------------------------------------------------------
    # صورة
    # ------------------------------------------------------------------
    def _render_image(
        self,
        content: ImageContent,
        target_width: int,
        target_height: int,
        bound: int,
    ) -> Image.Image:
        if not content.overlay_bytes:
            raise InvalidWatermarkImage("Watermark image is required for image watermarks.")

        try:
            overlay = self.codec.decode(self.codec.open(content.overlay_bytes))
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise InvalidWatermarkImage("Watermark image could not be decoded.") from exc

        overlay = overlay.convert("RGBA")
        width, height = self.overlay_size(overlay.size, target_width, target_height, content.scale)
        crop_width, crop_height = min(width, bound), min(height, bound)

        if (crop_width, crop_height) != (width, height):
            # نأخذ من الأصل الجزء المقابل لوسط العلامة المكبرة فقط
            sx = overlay.width / width
            sy = overlay.height / height
            box = (
                (width - crop_width) / 2 * sx,
                (height - crop_height) / 2 * sy,
                (width + crop_width) / 2 * sx,
                (height + crop_height) / 2 * sy,
            )
            return self.codec.resize(overlay, (crop_width, crop_height), box=box)
        if (width, height) != overlay.size:
            return self.codec.resize(overlay, (width, height))
        return overlay

    def overlay_size(
        self,
        source_size: Tuple[int, int],
        target_width: int,
        target_height: int,
        scale: float,
    ) -> Tuple[int, int]:
        """الضلع الأطول = ``scale`` × الضلع الأقصر للصورة الهدف مع الحفاظ على النسبة."""
        width, height = source_size
        longest = max(1, round(scale * min(target_width, target_height)))
        if not self.allow_upscale:
            longest = min(longest, max(width, height))

        ratio = longest / max(width, height)
        return max(1, round(width * ratio)), max(1, round(height * ratio))
