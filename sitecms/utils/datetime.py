# ================================
# file: sitecms/utils/datetime.py
# ================================
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    """Thời điểm hiện tại (UTC, naive) để lưu DB thống nhất giữa MySQL/SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_str() -> str:
    return utcnow().strftime("%Y-%m-%d %H:%M:%S")


def months_ago(moment: datetime, months: int = 1) -> datetime:
    """Lùi theo tháng lịch như INTERVAL n MONTH của MySQL (31/3 -> 28 hoặc 29/2)."""
    return moment - relativedelta(months=months)
