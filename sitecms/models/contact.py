# sitecms/models/contact.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, func
from sitecms.db.base import Base
from sitecms.utils.datetime import utcnow

CONTACT_STATUSES = ("new", "read", "replied", "archived")
ADMISSION_STATUSES = ("new", "reviewing", "accepted", "rejected")


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(128), nullable=False)
    email = Column(String(128), nullable=False)
    phone = Column(String(32))
    subject = Column(String(255))
    message = Column(Text, nullable=False)
    ip_address = Column(String(64))
    status = Column(String(20), nullable=False, default="new", index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "subject": self.subject,
            "message": self.message,
            "ip_address": self.ip_address,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class AdmissionApplication(Base):
    __tablename__ = "admission_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_name = Column(String(128), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    parent_name = Column(String(128), nullable=False)
    email = Column(String(128), nullable=False)
    phone = Column(String(32), nullable=False)
    level_applying = Column(String(64), nullable=False)
    message = Column(Text)
    ip_address = Column(String(64))
    status = Column(String(20), nullable=False, default="new", index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "student_name": self.student_name,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "parent_name": self.parent_name,
            "email": self.email,
            "phone": self.phone,
            "level_applying": self.level_applying,
            "message": self.message,
            "ip_address": self.ip_address,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
