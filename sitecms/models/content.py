# sitecms/models/content.py
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, Numeric, ForeignKey, func
)
from sitecms.db.base import Base
from sitecms.utils.datetime import utcnow

PAGE_STATUSES = ("published", "draft", "archived")
NEWS_STATUSES = ("published", "draft", "archived")
PROGRAM_STATUSES = ("active", "inactive", "archived")
PROGRAM_LEVELS = ("certificate", "diploma", "degree", "masters", "phd")


def _iso(v):
    return v.isoformat() if v else None


def _columns_dict(obj) -> dict:
    out = {}
    for col in obj.__table__.columns:
        v = getattr(obj, col.key)
        out[col.key] = _iso(v) if hasattr(v, "isoformat") else v
    return out


class Page(Base):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    content = Column(Text)
    meta_description = Column(Text)
    meta_keywords = Column(String(255))
    status = Column(String(20), nullable=False, default="draft")
    template = Column(String(64), nullable=False, default="default")
    sort_order = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return _columns_dict(self)

    def __repr__(self) -> str:
        return f"<Page(id={self.id}, slug='{self.slug}', status='{self.status}')>"


class NewsItem(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    content = Column(Text)
    excerpt = Column(Text)
    featured_image = Column(String(255))
    status = Column(String(20), nullable=False, default="draft")
    is_featured = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return _columns_dict(self)

    def __repr__(self) -> str:
        return f"<NewsItem(id={self.id}, slug='{self.slug}', status='{self.status}')>"


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    content = Column(Text)
    duration = Column(String(64))
    level = Column(String(20), nullable=False)
    requirements = Column(Text)
    fees = Column(Numeric(12, 2), nullable=True)
    featured_image = Column(String(255))
    status = Column(String(20), nullable=False, default="active")
    sort_order = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        data = _columns_dict(self)
        data["fees"] = float(self.fees) if self.fees is not None else None
        return data

    def __repr__(self) -> str:
        return f"<Program(id={self.id}, slug='{self.slug}', level='{self.level}')>"


class StaffMember(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(128), nullable=False)
    position = Column(String(128), nullable=False)
    department = Column(String(128), index=True)
    email = Column(String(128))
    phone = Column(String(32))
    bio = Column(Text)
    qualifications = Column(Text)
    profile_image = Column(String(255))
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return _columns_dict(self)

    def __repr__(self) -> str:
        return f"<StaffMember(id={self.id}, name='{self.full_name}')>"
