from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from watermark_api.core.config import get_settings
from watermark_api.core.errors import error_detail


def _bearer_token(auth_header: Optional[str]) -> Optional[str]:
    if auth_header and auth_header.strip().lower().startswith("bearer "):
        return auth_header.strip()[7:].strip() or None
    return None


def require_bearer_token(authorization: Optional[str] = Header(None)) -> None:
    """
    رفض الطلب ما لم يحمل ``Authorization: Bearer <api_token>``.

    إذا لم يُضبط ``api_token`` تبقى النقطة عامة.
    """
    expected = (get_settings().api_token or "").strip()
    if not expected:
        return

    token = _bearer_token(authorization)
    if not token or not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("UNAUTHORIZED", "Missing or invalid bearer token."),
            headers={"WWW-Authenticate": "Bearer"},
        )
