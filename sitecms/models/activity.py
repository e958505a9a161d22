# sitecms/models/activity.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sitecms.db.base import Base
from sitecms.utils.datetime import utcnow


class ActivityLogEntry(Base):
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # user bị xoá -> giữ log, user_id về NULL
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    details = Column(Text)
    ip_address = Column(String(64))
    request_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "details": self.details,
            "ip_address": self.ip_address,
            "request_id": self.request_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
