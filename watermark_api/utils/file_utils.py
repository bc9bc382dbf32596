from typing import Optional

from fastapi import HTTPException, status

from watermark_api.core.errors import error_detail


def sniff_image_format(data: bytes) -> Optional[str]:
    """تحديد نوع الصورة من البايتات الأولى."""
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "png"
    if data[:3] == b"\xff\xd8\xff":
        return "jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None


def ensure_image(data: bytes, field: str, max_size: int) -> str:
    """التحقق من حجم الصورة المرفوعة ونوعها، وإرجاع النوع المكتشف."""
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("VALIDATION_ERROR", f"{field} is empty."),
        )
    if len(data) > max_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=error_detail("PAYLOAD_TOO_LARGE", f"{field} exceeds the maximum size of {max_size} bytes."),
        )

    detected = sniff_image_format(data)
    if detected is None:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=error_detail("UNSUPPORTED_MEDIA_TYPE", f"{field} must be a JPEG, PNG or WebP image."),
        )
    return detected
