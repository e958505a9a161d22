# sitecms/core/logging.py
import logging
from contextvars import ContextVar
from typing import Optional

request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [rid=%(request_id)s] %(message)s"


def get_request_id() -> Optional[str]:
    return request_id_context.get()


class RequestIdFilter(logging.Filter):
    """Gắn request id hiện tại vào mọi log record (mặc định '-')."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    # gọi nhiều lần (reload, test) không nhân đôi handler
    if any(getattr(h, "_sitecms", False) for h in root.handlers):
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler()
    handler._sitecms = True  # type: ignore[attr-defined]
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper())
