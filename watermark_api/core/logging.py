import logging
from logging import Logger
from typing import Optional

from .config import get_settings

LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"


def resolve_level(name: str) -> int:
    """تحويل LOG_LEVEL النصي إلى مستوى logging، والقيم المجهولة تصبح INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(component: Optional[str] = None) -> Logger:
    """
    إرجاع مسجل الخدمة، أو مسجل فرعي باسم المكوّن.

    المعالج يُضاف مرة واحدة على المسجل الرئيسي، والمسجلات الفرعية ترسل إليه.
    """
    settings = get_settings()
    logger = logging.getLogger(settings.app_name)

    if not logger.handlers:
        logger.setLevel(resolve_level(settings.log_level))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger.getChild(component) if component else logger
