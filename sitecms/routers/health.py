# ================================
# file: sitecms/routers/health.py
# ================================
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sitecms.core.responses import success
from sitecms.db.session import get_db
from sitecms.utils.datetime import utcnow

log = logging.getLogger("sitecms.health")

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        log.warning("health check: database ping failed", exc_info=True)
        database = "unavailable"
    return success("OK", {"time": utcnow().isoformat(), "database": database})
