import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from pydantic import ValidationError

from watermark_api.core.config import get_settings
from watermark_api.core.errors import (
    ImageTooLarge,
    InvalidSourceImage,
    InvalidWatermarkImage,
    ProcessingError,
    WatermarkError,
    error_detail,
)
from watermark_api.core.logging import configure_logging
from watermark_api.core.security import require_bearer_token
from watermark_api.models import ImageLimits, WatermarkKind, WatermarkOptions
from watermark_api.services.watermark_service import WatermarkService
from watermark_api.utils.file_utils import ensure_image

router = APIRouter(prefix="/watermark", tags=["Watermark"])

logger = configure_logging("api")
watermark_service = WatermarkService()

ERROR_STATUS = {
    InvalidSourceImage: status.HTTP_400_BAD_REQUEST,
    InvalidWatermarkImage: status.HTTP_400_BAD_REQUEST,
    ImageTooLarge: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ProcessingError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

NO_STORE = "no-store, no-cache, must-revalidate"


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def _parse_options(fields: dict) -> WatermarkOptions:
    try:
        return WatermarkOptions.model_validate({key: value for key, value in fields.items() if value not in (None, "")})
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("VALIDATION_ERROR", _validation_message(exc)),
        ) from exc


@router.post(
    "",
    summary="Watermark an image and return the result",
    dependencies=[Depends(require_bearer_token)],
)
async def create_watermark(
    image: UploadFile = File(...),
    wm_image: Optional[UploadFile] = File(None),
    watermark_type: Optional[str] = Form(None, alias="type"),
    mode: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    margin_px: Optional[str] = Form(None),
    spacing_px: Optional[str] = Form(None),
    text: Optional[str] = Form(None),
    font: Optional[str] = Form(None),
    font_weight: Optional[str] = Form(None),
    font_size: Optional[str] = Form(None),
    color: Optional[str] = Form(None),
    wm_scale: Optional[str] = Form(None),
    opacity: Optional[str] = Form(None),
    angle_deg: Optional[str] = Form(None),
    output_format: Optional[str] = Form(None),
    quality: Optional[str] = Form(None),
) -> Response:
    settings = get_settings()

    source_bytes = await image.read()
    ensure_image(source_bytes, "image", settings.max_file_size)

    options = _parse_options(
        {
            "type": watermark_type,
            "mode": mode,
            "position": position,
            "margin_px": margin_px,
            "spacing_px": spacing_px,
            "text": text,
            "font": font,
            "font_weight": font_weight,
            "font_size": font_size,
            "color": color,
            "wm_scale": wm_scale,
            "opacity": opacity,
            "angle_deg": angle_deg,
            "output_format": output_format,
            "quality": quality,
        }
    )

    overlay_bytes: Optional[bytes] = None
    if options.type == WatermarkKind.image and wm_image is not None:
        overlay_bytes = await wm_image.read()
        if overlay_bytes:
            ensure_image(overlay_bytes, "wm_image", settings.max_file_size)

    spec = options.to_spec(overlay_bytes)
    limits = ImageLimits(max_width=settings.max_image_width, max_height=settings.max_image_height)

    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(watermark_service.composite, source_bytes, spec, limits),
            timeout=settings.processing_timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("Watermarking %s timed out after %ss", image.filename, settings.processing_timeout_seconds)
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=error_detail("PROCESSING_TIMEOUT", "Image processing took too long."),
        ) from exc
    except WatermarkError as exc:
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        if status_code >= 500:
            logger.exception("Watermarking %s failed", image.filename)
        else:
            logger.warning("Rejected %s: %s", image.filename, exc.message)
        raise HTTPException(status_code=status_code, detail=error_detail(exc.code, exc.message)) from exc

    logger.info(
        "Watermarked %s (type=%s, mode=%s, format=%s, %d bytes)",
        image.filename,
        options.type.value,
        options.mode.value,
        options.output_format.value,
        len(result.content),
    )

    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={"Cache-Control": NO_STORE},
    )
