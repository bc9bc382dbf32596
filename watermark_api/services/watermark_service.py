from __future__ import annotations

from typing import Optional

from PIL import Image

from watermark_api.core.errors import (
    ImageTooLarge,
    InvalidSourceImage,
    InvalidWatermarkImage,
    ProcessingError,
)
from watermark_api.models.watermark import (
    CONTENT_TYPES,
    ImageContent,
    ImageLimits,
    WatermarkResult,
    WatermarkSpec,
)
from watermark_api.services.geometry import compute_positions
from watermark_api.services.overlay_renderer import OverlayRenderer
from watermark_api.services.raster_codec import RasterCodec


class WatermarkService:
    """فك الصورة الأصلية، وطبع العلامة في كل موضع، ثم إعادة ترميزها."""

    def __init__(
        self,
        codec: Optional[RasterCodec] = None,
        renderer: Optional[OverlayRenderer] = None,
    ) -> None:
        self.codec = codec or RasterCodec()
        self.renderer = renderer or OverlayRenderer(self.codec)

    def composite(self, source_bytes: bytes, spec: WatermarkSpec, limits: ImageLimits) -> WatermarkResult:
        if isinstance(spec.content, ImageContent) and not spec.content.overlay_bytes:
            raise InvalidWatermarkImage("Watermark image is required for image watermarks.")

        source = self._open_source(source_bytes, limits)
        keep_alpha = self.codec.has_alpha(source)
        try:
            canvas = self.codec.decode(source).convert("RGBA")
        except (OSError, ValueError) as exc:
            raise InvalidSourceImage("Source image could not be decoded.") from exc

        # تُرسم العلامة مرة واحدة وتُستخدم لكل المواضع
        overlay = self.renderer.render(spec, canvas.width, canvas.height)
        points = compute_positions(canvas.width, canvas.height, spec.placement, overlay.width, overlay.height)

        try:
            for point in points:
                self.codec.composite(canvas, overlay, point)
            content = self.codec.encode(canvas, spec.output_format, spec.quality, keep_alpha=keep_alpha)
        except (OSError, ValueError, MemoryError) as exc:
            raise ProcessingError(f"Failed to produce {spec.output_format.value} output: {exc}") from exc

        return WatermarkResult(content=content, content_type=CONTENT_TYPES[spec.output_format])

    def _open_source(self, source_bytes: bytes, limits: ImageLimits) -> Image.Image:
        try:
            image = self.codec.open(source_bytes)
        except Image.DecompressionBombError as exc:
            raise ImageTooLarge("Image exceeds the decoder's pixel limit.") from exc
        except (OSError, ValueError) as exc:
            raise InvalidSourceImage("Source image could not be decoded.") from exc

        # الحدود تُطبّق على الأبعاد بعد تصحيح اتجاه EXIF
        width, height = self.codec.oriented_size(image)
        if width > limits.max_width or height > limits.max_height:
            raise ImageTooLarge(
                f"Image dimensions {width}x{height} exceed maximum allowed "
                f"({limits.max_width}x{limits.max_height})."
            )
        return image
