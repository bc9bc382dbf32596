from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات الخدمة، تُقرأ من متغيرات البيئة وملف .env إن وُجد."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Watermark API"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[1])
    fonts_dir: Optional[Path] = None

    max_file_size: int = 6 * 1024 * 1024
    max_image_width: int = 4096
    max_image_height: int = 4096
    allow_watermark_upscale: bool = True
    processing_timeout_seconds: float = 25.0

    api_token: Optional[str] = None

    # قائمة JSON أو نص مفصول بفواصل مثل "https://a.com,https://b.com"
    allow_origins: Union[list[str], str] = Field(default_factory=lambda: ["*"])
    allow_origin_regex: Optional[str] = None
    allow_credentials: bool = False

    def configure_paths(self) -> None:
        """تحديد مجلد الخطوط المرفقة."""
        self.fonts_dir = (self.fonts_dir or (self.base_dir / "assets" / "fonts")).resolve()


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
