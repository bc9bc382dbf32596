from __future__ import annotations

from io import BytesIO
from typing import Optional, Tuple

from PIL import ExifTags, Image, ImageOps

from watermark_api.models.watermark import OutputFormat, Point

# اتجاهات EXIF التي تبدّل العرض بالارتفاع (تدوير 90° أو 270°)
TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}


class RasterCodec:
    """فك وترميز الصور ودمج الطبقات الشفافة عبر Pillow."""

    SAVE_FORMATS = {
        OutputFormat.png: "PNG",
        OutputFormat.jpeg: "JPEG",
        OutputFormat.webp: "WEBP",
    }

    # ------------------------------------------------------------------
    # فك / ترميز
    # ------------------------------------------------------------------
    def open(self, data: bytes) -> Image.Image:
        """قراءة الترويسة فقط؛ البكسلات تُحمّل لاحقًا في :meth:`decode`."""
        return Image.open(BytesIO(data))

    def decode(self, image: Image.Image) -> Image.Image:
        image.load()
        return ImageOps.exif_transpose(image)

    @staticmethod
    def oriented_size(image: Image.Image) -> Tuple[int, int]:
        """أبعاد الصورة كما ستظهر بعد تطبيق اتجاه EXIF، دون تحميل البكسلات."""
        width, height = image.size
        orientation = image.getexif().get(ExifTags.Base.Orientation)
        if orientation in TRANSPOSED_ORIENTATIONS:
            return height, width
        return width, height

    @staticmethod
    def has_alpha(image: Image.Image) -> bool:
        return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info

    def encode(
        self,
        image: Image.Image,
        output_format: OutputFormat,
        quality: int = 90,
        keep_alpha: bool = True,
    ) -> bytes:
        buffer = BytesIO()
        save_format = self.SAVE_FORMATS[OutputFormat(output_format)]

        if save_format == "JPEG":
            image.convert("RGB").save(buffer, save_format, quality=quality, optimize=True)
        elif save_format == "WEBP":
            (image if keep_alpha else image.convert("RGB")).save(buffer, save_format, quality=quality)
        else:
            (image if keep_alpha else image.convert("RGB")).save(buffer, save_format, compress_level=6)

        return buffer.getvalue()

    # ------------------------------------------------------------------
    # عمليات البكسل
    # ------------------------------------------------------------------
    def resize(
        self,
        image: Image.Image,
        size: Tuple[int, int],
        box: Optional[Tuple[float, float, float, float]] = None,
    ) -> Image.Image:
        """تغيير الحجم، ومع ``box`` يُؤخذ ذلك الجزء من الأصل فقط."""
        return image.resize(size, Image.Resampling.LANCZOS, box=box)

    def rotate(self, image: Image.Image, degrees: int) -> Image.Image:
        """تدوير باتجاه عقارب الساعة حول المركز مع توسيع اللوحة لتتسع للنتيجة."""
        if degrees % 360 == 0:
            return image
        return image.rotate(-degrees, resample=Image.Resampling.BICUBIC, expand=True)

    def apply_opacity(self, image: Image.Image, opacity: float) -> Image.Image:
        """نسخة RGBA تُضرب قناة الشفافية فيها بـ ``opacity``."""
        image = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
        if opacity >= 1:
            return image

        factor = max(0.0, opacity)
        alpha = image.getchannel("A").point(lambda value: round(value * factor))
        image.putalpha(alpha)
        return image

    def composite(self, canvas: Image.Image, overlay: Image.Image, point: Point) -> bool:
        """
        دمج ``overlay`` فوق ``canvas`` في مكانه، وزاويته العليا اليسرى عند ``point``.

        ما يخرج من حدود اللوحة يُقص. تُرجع False إذا لم يقع أي جزء من العلامة
        داخل اللوحة.
        """
        x, y = point
        left = max(x, 0)
        top = max(y, 0)
        right = min(x + overlay.width, canvas.width)
        bottom = min(y + overlay.height, canvas.height)
        if right <= left or bottom <= top:
            return False

        source = (left - x, top - y, right - x, bottom - y)
        canvas.alpha_composite(overlay, dest=(left, top), source=source)
        return True
