# ================================
# file: sitecms/core/config.py
# ================================
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # DB mặc định SQLite cho dev; production đặt DB_URL, ví dụ:
    # mysql+pymysql://root:@localhost:3306/site_cms?charset=utf8mb4
    DB_URL: str = "sqlite:///./sitecms.db"
    # MySQL không kết nối được lúc khởi động -> chạy tạm bằng SQLite
    DB_FALLBACK_SQLITE: bool = False

    # Session cookie (ký bằng itsdangerous). MAX_AGE = thời gian sống của phiên.
    SESSION_SECRET: str = "change-me-please"
    SESSION_MAX_AGE: int = 60 * 60
    SESSION_COOKIE: str = "sitecms_session"

    SITE_NAME: str = "Blessed Nursery and Primary School"
    SITE_URL: str = "http://localhost:8000"
    ADMIN_EMAIL: str = "admin@blessednursery.ac.ug"

    # Upload
    UPLOAD_ROOT: str = "uploads"
    MAX_FILE_SIZE: int = 5 * 1024 * 1024
    ALLOWED_IMAGE_TYPES: List[str] = ["jpg", "jpeg", "png", "gif", "webp"]
    ALLOWED_DOCUMENT_TYPES: List[str] = ["pdf", "doc", "docx", "txt"]

    # Phân trang: public / admin
    ITEMS_PER_PAGE: int = 10
    ADMIN_ITEMS_PER_PAGE: int = 20
    MAX_ITEMS_PER_PAGE: int = 100

    # Hash mật khẩu
    PASSWORD_HASH_SCHEME: str = "argon2"
    ARGON2_TIME_COST: int = 3
    ARGON2_MEMORY_COST: int = 65536

    # Kênh thông báo ra ngoài (để trống = tắt)
    NOTIFY_WEBHOOK_URL: str = ""
    NOTIFY_TIMEOUT: float = 5.0

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def allowed_extensions(self) -> set:
        return {e.lower() for e in (*self.ALLOWED_IMAGE_TYPES, *self.ALLOWED_DOCUMENT_TYPES)}


settings = Settings()
