from sqlalchemy import Column, Integer, String, DateTime, Boolean, func
from sitecms.db.base import Base
from sitecms.utils.datetime import utcnow

USER_ROLES = ("admin", "editor")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False)
    email = Column(String(128), unique=True, nullable=False)

    # hash argon2 (hoặc MD5 cũ chờ nâng cấp khi đăng nhập)
    password_hash = Column(String(255), nullable=False)

    full_name = Column(String(128))
    role = Column(String(20), nullable=False, default="editor")
    is_active = Column(Boolean, nullable=False, default=True)

    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self, with_timestamps: bool = False):
        data = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
        }
        if with_timestamps:
            data["created_at"] = self.created_at.isoformat() if self.created_at else None
            data["last_login_at"] = self.last_login_at.isoformat() if self.last_login_at else None
        return data

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
