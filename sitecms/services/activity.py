# sitecms/services/activity.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from sitecms.models.activity import ActivityLogEntry

log = logging.getLogger("sitecms.activity")


def write_activity(
    db: Session,
    *,
    action: str,
    details: str = "",
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ActivityLogEntry:
    """Thêm 1 dòng nhật ký. Không commit ở đây (để caller chủ động)."""
    row = ActivityLogEntry(
        user_id=user_id,
        action=action,
        details=details or "",
        ip_address=ip_address or "unknown",
        request_id=request_id,
    )
    db.add(row)
    return row


def log_activity(ctx, action: str, details: str = "") -> None:
    """
    Ghi nhật ký best-effort trong session riêng: lỗi ghi log không bao giờ
    làm hỏng thao tác chính, chỉ ghi cảnh báo.
    """
    try:
        with Session(bind=ctx.db.get_bind()) as db:
            write_activity(
                db,
                action=action,
                details=details,
                user_id=ctx.user_id,
                ip_address=ctx.ip_address,
                request_id=ctx.request_id,
            )
            db.commit()
    except Exception:
        log.warning("activity log write failed: action=%s", action, exc_info=True)
