# watermark_api/main.py
from __future__ import annotations

from typing import Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from watermark_api.api import routers
from watermark_api.core.config import get_settings
from watermark_api.core.logging import configure_logging

# === إعدادات وتسجيل ===
settings = get_settings()
logger = configure_logging()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
)


# === CORS ===
# الإعداد يصل قائمة (من JSON أو القيمة الافتراضية) أو نصًا مفصولًا بفواصل.
def _as_list(val: Union[list[str], str], fallback: list[str]) -> list[str]:
    if isinstance(val, list):
        items = [str(x).strip() for x in val]
    else:
        items = [x.strip() for x in val.split(",")]
    return [x for x in items if x] or fallback


allow_origins = _as_list(settings.allow_origins, fallback=["*"])
allow_credentials = settings.allow_credentials

# المتصفحات ترفض الاعتمادات مع origin عام "*"
if allow_credentials and ("*" in allow_origins):
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_origin_regex=settings.allow_origin_regex,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    max_age=600,
)

# === الموجّهات ===
for router in routers:
    app.include_router(router)


# === نقاط أساسية ===
@app.get("/")
async def root() -> dict:
    logger.debug("Root endpoint accessed")
    return {"message": f"{settings.app_name} is running"}


@app.get("/health")
async def health_check() -> dict:
    logger.debug("Health check invoked")
    return {"status": "ok", "message": "Watermark API is running", "version": settings.app_version}
