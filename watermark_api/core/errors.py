class WatermarkError(Exception):
    """الأصل المشترك لأخطاء نواة العلامة المائية."""

    code = "WATERMARK_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidSourceImage(WatermarkError):
    code = "INVALID_SOURCE_IMAGE"


class InvalidWatermarkImage(WatermarkError):
    code = "INVALID_WATERMARK_IMAGE"


class ImageTooLarge(WatermarkError):
    code = "IMAGE_TOO_LARGE"


class ProcessingError(WatermarkError):
    code = "PROCESSING_ERROR"


def error_detail(code: str, message: str) -> dict:
    """جسم ``HTTPException.detail`` لكل استجابة خطأ."""
    return {"code": code, "message": message}
