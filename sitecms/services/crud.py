# sitecms/services/crud.py
"""
Các bước CRUD dùng chung cho mọi resource: phân trang + lọc, lấy theo id/slug,
kiểm tra slug trùng, gom field cho partial update, xoá có kiểm tra tồn tại.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.orm import Session

from sitecms.core.errors import NotFoundError, UniqueConflict, ValidationError
from sitecms.db.gateway import execute_write, fetch_all, fetch_one, fetch_scalar, insert_record
from sitecms.models.user import User
from sitecms.schemas.common import Pagination
from sitecms.core.config import settings
from sitecms.utils.sanitize import ensure_scalar, sanitize_text

log = logging.getLogger("sitecms.crud")

SLUG_EXISTS = "Slug already exists"
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}
# INT có dấu 32-bit: giới hạn chung của cột id/sort_order trên MySQL
MAX_DB_INT = 2**31 - 1


# ================= Paging =================
@dataclass
class Paging:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(raw: Any, default: int, maximum: int = MAX_DB_INT) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    return min(value, maximum)


def parse_paging(params: Mapping[str, Any], default_limit: int) -> Paging:
    return Paging(
        page=_positive_int(params.get("page"), 1),
        limit=_positive_int(params.get("limit"), default_limit, settings.MAX_ITEMS_PER_PAGE),
    )


def default_limit(ctx) -> int:
    """Trang quản trị (đã đăng nhập) xem nhiều hơn website công khai."""
    return settings.ADMIN_ITEMS_PER_PAGE if ctx.is_authenticated() else settings.ITEMS_PER_PAGE


def parse_limit(params: Mapping[str, Any], default: int = 0) -> int:
    """limit tuỳ chọn cho các view công khai; <= 0 nghĩa là không giới hạn."""
    try:
        value = int(str(params.get("limit", default)).strip() or default)
    except (TypeError, ValueError):
        return default
    return min(value, settings.MAX_ITEMS_PER_PAGE)


def parse_bool(raw: Any, default: Optional[bool] = None) -> Optional[bool]:
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    s = str(raw).strip().lower()
    if s in TRUE_VALUES:
        return True
    if s in FALSE_VALUES:
        return False
    return default


def parse_id(raw: Any, label: str) -> int:
    if raw is None or str(raw).strip() == "":
        raise ValidationError(f"{label} ID is required")
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Invalid {label} ID")
    if not 0 < value <= MAX_DB_INT:
        raise ValidationError(f"Invalid {label} ID")
    return value


def pagination_meta(paging: Paging, total: int) -> Dict[str, int]:
    return Pagination(
        current_page=paging.page,
        total_pages=math.ceil(total / paging.limit) if total else 0,
        total_items=total,
        items_per_page=paging.limit,
    ).model_dump()


# ================= Filters =================
def build_conditions(
    *,
    equals: Optional[Mapping[Any, Any]] = None,
    search: Optional[str] = None,
    search_columns: Sequence[Any] = (),
    extra: Iterable[Any] = (),
) -> list:
    """
    Gộp điều kiện AND. Giá trị rỗng/None bị bỏ qua, không bao giờ lọc theo chuỗi rỗng.
    search: so khớp chuỗi con không phân biệt hoa thường trên các cột đã chỉ định.
    """
    conds = []
    for col, value in (equals or {}).items():
        if value is None or value == "":
            continue
        conds.append(col == value)
    term = (search or "").strip()
    if term and search_columns:
        like = f"%{term}%"
        conds.append(or_(*[c.ilike(like) for c in search_columns]))
    conds.extend(extra)
    return conds


def _row_dict(row, author_label: Optional[str]) -> dict:
    obj = row[0]
    data = obj.to_dict()
    if author_label:
        data[author_label] = row[1]
    return data


def select_with_author(model, author_column=None, author_label: Optional[str] = None):
    if author_column is not None and author_label:
        return (
            select(model, User.username.label(author_label))
            .outerjoin(User, author_column == User.id)
        )
    return select(model)


def paginate(
    db: Session,
    model,
    *,
    conditions: Sequence[Any],
    order_by: Sequence[Any],
    paging: Paging,
    author_column=None,
    author_label: Optional[str] = None,
) -> tuple[List[dict], Dict[str, int]]:
    """
    Đếm tổng và lấy trang bằng CÙNG một predicate, để total khớp với dữ liệu trả về.
    """
    where = and_(*conditions) if conditions else None

    count_stmt = select(func.count()).select_from(model)
    if where is not None:
        count_stmt = count_stmt.where(where)
    total = int(fetch_scalar(db, count_stmt, 0))

    stmt = select_with_author(model, author_column, author_label)
    if where is not None:
        stmt = stmt.where(where)
    stmt = stmt.order_by(*order_by).offset(paging.offset).limit(paging.limit)

    items = [_row_dict(r, author_label) for r in fetch_all(db, stmt)]
    return items, pagination_meta(paging, total)


def list_all(
    db: Session,
    model,
    *,
    conditions: Sequence[Any],
    order_by: Sequence[Any],
    limit: int = 0,
    author_column=None,
    author_label: Optional[str] = None,
) -> List[dict]:
    stmt = select_with_author(model, author_column, author_label)
    if conditions:
        stmt = stmt.where(and_(*conditions))
    stmt = stmt.order_by(*order_by)
    if limit and limit > 0:
        stmt = stmt.limit(limit)
    return [_row_dict(r, author_label) for r in fetch_all(db, stmt)]


# ================= Get =================
def get_by_id_or_slug(
    db: Session,
    model,
    *,
    ident: Any,
    slug: Optional[str] = None,
    label: str,
    author_column=None,
    author_label: Optional[str] = None,
) -> dict:
    has_id = ident is not None and str(ident).strip() != ""
    has_slug = bool((slug or "").strip())
    if not has_id and not has_slug:
        if hasattr(model, "slug"):
            raise ValidationError(f"{label} ID or slug is required")
        raise ValidationError(f"{label} ID is required")

    stmt = select_with_author(model, author_column, author_label)
    if has_id:
        stmt = stmt.where(model.id == parse_id(ident, label))
    else:
        stmt = stmt.where(model.slug == slug.strip())

    row = fetch_one(db, stmt)
    if not row:
        raise NotFoundError(f"{label} not found")
    return _row_dict(row, author_label)


def get_or_404(db: Session, model, row_id: int, label: str):
    obj = db.get(model, row_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


# ================= Validation helpers =================
def require_fields(body: Mapping[str, Any], names: Sequence[str], message: str) -> None:
    if not body:
        raise ValidationError(message)
    for n in names:
        v = body.get(n)
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValidationError(message)


def require_enum(value: Any, allowed: Sequence[str], message: str) -> str:
    if value not in allowed:
        raise ValidationError(message)
    return value


def ensure_slug_free(db: Session, model, slug: str, exclude_id: Optional[int] = None) -> None:
    """Kiểm tra trước để báo lỗi rõ ràng; unique index của DB mới là chốt chặn cuối."""
    stmt = select(model.id).where(model.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if fetch_one(db, stmt):
        raise ValidationError(SLUG_EXISTS)


def to_int(raw: Any, name: str, default: Optional[int] = None) -> Optional[int]:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}")
    if abs(value) > MAX_DB_INT:
        raise ValidationError(f"Invalid {name}")
    return value


def to_decimal(raw: Any, name: str) -> Optional[Decimal]:
    if raw is None or raw == "":
        return None
    try:
        return Decimal(str(raw)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {name}")


def to_datetime(raw: Any, name: str) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        raise ValidationError(f"Invalid {name}")


# ================= Create =================
def create_record(db: Session, obj, conflict_message: str = SLUG_EXISTS) -> int:
    try:
        return insert_record(db, obj)
    except UniqueConflict:
        raise ValidationError(conflict_message)


# ================= Partial update =================
class UpdateBuilder:
    """
    Gom các field thực sự được gửi lên. Field vắng mặt, null, hoặc chuỗi rỗng
    không bao giờ được ghi đè.
    """

    def __init__(self, body: Mapping[str, Any]):
        self.body = body or {}
        self.fields: Dict[str, Any] = {}

    def _present(self, name: str) -> bool:
        v = self.body.get(name)
        return v is not None and not (isinstance(v, str) and v.strip() == "")

    def has(self, name: str) -> bool:
        return name in self.fields

    def text(self, name: str, *, allowed: Optional[Sequence[str]] = None, message: str = "") -> Optional[str]:
        if not self._present(name):
            return None
        value = sanitize_text(self.body[name])
        if value == "":
            return None
        if allowed is not None:
            require_enum(value, allowed, message or f"Invalid {name}")
        self.fields[name] = value
        return value

    def raw(self, name: str) -> Optional[str]:
        # nội dung HTML soạn thảo: giữ nguyên, không sanitize
        if not self._present(name):
            return None
        self.fields[name] = ensure_scalar(self.body[name])
        return self.fields[name]

    def integer(self, name: str) -> Optional[int]:
        if not self._present(name):
            return None
        self.fields[name] = to_int(self.body[name], name)
        return self.fields[name]

    def boolean(self, name: str) -> Optional[bool]:
        if not self._present(name):
            return None
        value = parse_bool(self.body[name])
        if value is None:
            raise ValidationError(f"Invalid {name}")
        self.fields[name] = value
        return value

    def decimal(self, name: str) -> Optional[Decimal]:
        if not self._present(name):
            return None
        self.fields[name] = to_decimal(self.body[name], name)
        return self.fields[name]

    def datetime(self, name: str) -> Optional[datetime]:
        if not self._present(name):
            return None
        self.fields[name] = to_datetime(self.body[name], name)
        return self.fields[name]

    def set(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def result(self) -> Dict[str, Any]:
        if not self.fields:
            raise ValidationError("No fields to update")
        return dict(self.fields)


def apply_update(db: Session, model, obj, fields: Mapping[str, Any], conflict_message: str = SLUG_EXISTS) -> int:
    """
    UPDATE chỉ các cột có giá trị khác hiện tại. Không có gì thay đổi,
    hoặc DB báo 0 dòng -> "No changes made" (khác với not found).
    """
    changed = {k: v for k, v in fields.items() if getattr(obj, k) != v}
    if not changed:
        raise ValidationError("No changes made")

    if hasattr(model, "updated_at") and "updated_at" not in changed:
        changed["updated_at"] = datetime.utcnow()

    stmt = (
        update(model)
        .where(model.id == obj.id)
        .values(**changed)
        .execution_options(synchronize_session=False)
    )
    try:
        affected = execute_write(db, stmt)
    except UniqueConflict:
        raise ValidationError(conflict_message)
    if affected == 0:
        raise ValidationError("No changes made")
    return affected


# ================= Delete =================
def delete_by_id(db: Session, model, row_id: int, label: str):
    obj = get_or_404(db, model, row_id, label)
    snapshot = obj.to_dict()
    affected = execute_write(
        db,
        delete(model).where(model.id == row_id).execution_options(synchronize_session=False),
    )
    if affected == 0:
        raise ValidationError(f"Failed to delete {label.lower()}")
    return snapshot
