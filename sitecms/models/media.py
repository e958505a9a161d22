# sitecms/models/media.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sitecms.db.base import Base
from sitecms.utils.datetime import utcnow


class MediaAsset(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    # đường dẫn tương đối so với UPLOAD_ROOT, vd "news/1700000000_ab12cd.png"
    file_path = Column(String(512), nullable=False)
    file_type = Column(String(128))
    file_size = Column(Integer, nullable=False, default=0)
    alt_text = Column(String(255))
    caption = Column(Text)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "filename": self.filename,
            "original_name": self.original_name,
            "file_path": self.file_path,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "alt_text": self.alt_text,
            "caption": self.caption,
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<MediaAsset(id={self.id}, filename='{self.filename}')>"
