# sitecms/utils/sanitize.py
from __future__ import annotations

import re
from typing import Any

from email_validator import EmailNotValidError, validate_email as _validate_email
from markupsafe import escape

from sitecms.core.errors import ValidationError

# thẻ HTML/XML, comment và processing instruction
TAG_RE = re.compile(r"<!--.*?-->|<\?.*?\?>|<[^>]*>", re.DOTALL)


def strip_tags(text: str) -> str:
    return TAG_RE.sub("", text)


def sanitize(value: Any) -> Any:
    """
    trim -> bỏ thẻ -> escape HTML (cả nháy đơn/kép).
    list/tuple/dict được xử lý đệ quy; None -> "".
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        return {k: sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize(v) for v in value)
    if not isinstance(value, str):
        value = str(value)
    return str(escape(strip_tags(value.strip())))


def ensure_scalar(value: Any) -> Any:
    # object/mảng JSON ở field đơn -> 400, không để lọt xuống cột DB
    if isinstance(value, (dict, list, tuple)):
        raise ValidationError("Invalid input data")
    return value


def sanitize_text(value: Any) -> str:
    return sanitize(ensure_scalar(value))


def validate_email(email: str) -> bool:
    """Kiểm tra cú pháp email, không tra DNS/MX."""
    if not email or not isinstance(email, str):
        return False
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
