from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import ImageFont

from watermark_api.core.config import get_settings
from watermark_api.core.logging import configure_logging

logger = configure_logging("fonts")

# معرّفات الخطوط المسموح بها، وملفاتها <id>-Regular.ttf و <id>-Bold.ttf
FONT_FILES = {
    "NotoSansThai": "NotoSansThai",
    "Roboto": "Roboto",
    "Inter": "Inter",
}
DEFAULT_FONT_ID = "Roboto"
BOLD_WEIGHT = 600

AnyFont = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@dataclass
class ResolvedFont:
    font: AnyFont
    font_id: str
    synthetic_bold: bool = False


@lru_cache(maxsize=256)
def _warn_once(message: str, *args) -> None:
    """تحذير واحد لكل رسالة ومعاملاتها طوال عمر العملية."""
    logger.warning(message, *args)


@lru_cache(maxsize=None)
def _read_font_file(path: Path) -> Optional[bytes]:
    if not path.is_file():
        return None
    return path.read_bytes()


class FontTable:
    """ربط معرّفات الخطوط المسموح بها بملفات TTF المرفقة، ولا تُحمّل أي مسارات أخرى."""

    def __init__(self, fonts_dir: Optional[Path] = None) -> None:
        self.fonts_dir = Path(fonts_dir or get_settings().fonts_dir)

    def resolve(self, font_id: str) -> str:
        if font_id in FONT_FILES:
            return font_id
        _warn_once("Unknown font %r requested, using %s instead.", font_id, DEFAULT_FONT_ID)
        return DEFAULT_FONT_ID

    def load(self, font_id: str, size_px: int, weight: int = 400) -> ResolvedFont:
        family = self.resolve(font_id)
        want_bold = weight >= BOLD_WEIGHT
        faces = ("Bold", "Regular") if want_bold else ("Regular",)

        for candidate in dict.fromkeys((family, DEFAULT_FONT_ID)):
            for face in faces:
                data = _read_font_file(self.fonts_dir / f"{FONT_FILES[candidate]}-{face}.ttf")
                if data is None:
                    continue
                if candidate != family:
                    _warn_once("Font files for %s are missing, using %s instead.", family, candidate)
                return ResolvedFont(
                    font=ImageFont.truetype(BytesIO(data), size_px),
                    font_id=candidate,
                    synthetic_bold=want_bold and face != "Bold",
                )

        _warn_once(
            "No bundled fonts found in %s, using Pillow's default font. See assets/fonts/README.md.",
            self.fonts_dir,
        )
        return ResolvedFont(
            font=ImageFont.load_default(size=size_px),
            font_id=family,
            synthetic_bold=want_bold,
        )
