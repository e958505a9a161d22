# sitecms/services/settings_store.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitecms.core.errors import UniqueConflict
from sitecms.db.gateway import execute_write, fetch_all, fetch_one, insert_record
from sitecms.models.setting import Setting
from sitecms.utils.datetime import utcnow

log = logging.getLogger("sitecms.settings")


def all_settings(db: Session) -> Dict[str, dict]:
    rows = fetch_all(db, select(Setting).order_by(Setting.setting_key.asc()))
    return {
        s.setting_key: {
            "value": s.setting_value,
            "type": s.setting_type,
            "description": s.description,
        }
        for (s,) in rows
    }


def find_setting(db: Session, key: str) -> Optional[Setting]:
    row = fetch_one(db, select(Setting).where(Setting.setting_key == key))
    return row[0] if row else None


def get_setting(db: Session, key: str, default: Any = None) -> Any:
    """Giá trị của 1 key; thiếu key hoặc DB lỗi -> default."""
    try:
        s = find_setting(db, key)
    except SQLAlchemyError:
        log.warning("could not read setting %s", key, exc_info=True)
        return default
    return s.setting_value if s is not None else default


def _store_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return "" if value is None else str(value)


def update_setting(db: Session, key: str, value: Any) -> None:
    """
    Upsert: có key thì ghi đè, chưa có thì thêm mới.
    Hai request cùng thêm 1 key: bên thua gặp unique conflict -> chuyển sang UPDATE.
    """
    stored = _store_value(value)
    existing = find_setting(db, key)
    if existing is None:
        try:
            insert_record(db, Setting(setting_key=key, setting_value=stored))
            return
        except UniqueConflict:
            log.debug("setting %s inserted concurrently, updating instead", key)

    execute_write(
        db,
        update(Setting)
        .where(Setting.setting_key == key)
        .values(setting_value=stored, updated_at=utcnow())
        .execution_options(synchronize_session=False),
    )


def bulk_update(db: Session, values: Mapping[str, Any]) -> tuple[int, List[str]]:
    """Cập nhật lần lượt từng key; 1 key lỗi không chặn các key còn lại."""
    updated = 0
    errors: List[str] = []
    for key, value in values.items():
        try:
            update_setting(db, key, value)
            updated += 1
        except (SQLAlchemyError, UniqueConflict) as e:
            db.rollback()
            log.warning("failed to update setting %s: %s", key, e)
            errors.append(f"Failed to update {key}")
    return updated, errors
