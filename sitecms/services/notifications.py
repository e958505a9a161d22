# sitecms/services/notifications.py
"""
Kênh thông báo ra ngoài (gửi email / sinh PDF do dịch vụ bên ngoài đảm nhận).
Chạy sau khi response đã trả về; mọi lỗi chỉ ghi log, không bao giờ lan ra caller.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from sitecms.core.config import settings

log = logging.getLogger("sitecms.notify")


def send_notification(kind: str, payload: Dict[str, Any], recipient: Optional[str] = None) -> bool:
    url = settings.NOTIFY_WEBHOOK_URL
    if not url:
        log.info("notification %s skipped: NOTIFY_WEBHOOK_URL not configured", kind)
        return False

    body = {
        "kind": kind,
        "site": settings.SITE_NAME,
        "recipient": recipient or settings.ADMIN_EMAIL,
        "payload": payload,
    }
    try:
        resp = httpx.post(url, json=body, timeout=settings.NOTIFY_TIMEOUT)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        log.warning("notification %s failed: %s", kind, e)
        return False
    except Exception:
        log.exception("notification %s failed unexpectedly", kind)
        return False
    return True


def notify(ctx, kind: str, payload: Dict[str, Any], recipient: Optional[str] = None) -> None:
    """Lên lịch gửi thông báo fire-and-forget sau response."""
    try:
        if ctx.background is not None:
            ctx.background.add_task(send_notification, kind, payload, recipient)
        else:
            send_notification(kind, payload, recipient)
    except Exception:
        log.warning("could not schedule notification %s", kind, exc_info=True)
