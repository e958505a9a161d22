# sitecms/db/gateway.py
"""
Thin helpers quanh Session: đọc 1 dòng / nhiều dòng, insert trả về id,
update/delete trả về số dòng bị ảnh hưởng. Không chứa nghiệp vụ.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sitecms.core.errors import UniqueConflict

log = logging.getLogger("sitecms.db")


def fetch_one(db: Session, stmt) -> Optional[Any]:
    return db.execute(stmt).first()


def fetch_all(db: Session, stmt) -> List[Any]:
    return list(db.execute(stmt).all())


def fetch_scalar(db: Session, stmt, default: Any = None) -> Any:
    value = db.execute(stmt).scalar()
    return default if value is None else value


def insert_record(db: Session, obj) -> int:
    """Thêm bản ghi, commit, trả về id sinh tự động."""
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log.debug("insert rejected by constraint: %s", e.orig)
        raise UniqueConflict(str(e.orig)) from e
    db.refresh(obj)
    return obj.id


def execute_write(db: Session, stmt) -> int:
    """UPDATE/DELETE có tham số; trả về rowcount."""
    try:
        result = db.execute(stmt)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log.debug("write rejected by constraint: %s", e.orig)
        raise UniqueConflict(str(e.orig)) from e
    return result.rowcount or 0
