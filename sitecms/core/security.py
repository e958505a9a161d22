# sitecms/core/security.py
from typing import Optional, Tuple

from passlib.context import CryptContext

from sitecms.core.config import settings

# hex_md5: chỉ để xác thực hash cũ (dữ liệu di chuyển từ hệ thống cũ), sẽ được
# băm lại bằng scheme mặc định ngay khi đăng nhập thành công.
LEGACY_SCHEMES = ["hex_md5"]


class PasswordHasher:
    def __init__(
        self,
        scheme: str = "argon2",
        time_cost: int = 3,
        memory_cost: int = 65536,
    ):
        options = {}
        if scheme == "argon2":
            options = {"argon2__time_cost": time_cost, "argon2__memory_cost": memory_cost}
        self._ctx = CryptContext(
            schemes=[scheme, *LEGACY_SCHEMES],
            default=scheme,
            deprecated=LEGACY_SCHEMES,
            **options,
        )

    def hash(self, plain: str) -> str:
        return self._ctx.hash(plain)

    def verify(self, plain: str, encoded: Optional[str]) -> bool:
        if not encoded:
            return False
        try:
            return self._ctx.verify(plain, encoded)
        except (ValueError, TypeError):
            # hash rỗng/hỏng hoặc không nhận diện được scheme
            return False

    def needs_rehash(self, encoded: str) -> bool:
        try:
            return self._ctx.needs_update(encoded)
        except (ValueError, TypeError):
            return False

    def verify_and_upgrade(self, plain: str, encoded: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Verify OK + hash cũ (MD5, tham số yếu hơn) -> trả về hash mới để lưu DB.
        Không cần nâng cấp -> (True, None). Sai mật khẩu -> (False, None).
        """
        if not self.verify(plain, encoded):
            return False, None
        if self.needs_rehash(encoded):
            return True, self.hash(plain)
        return True, None


hasher = PasswordHasher(
    scheme=settings.PASSWORD_HASH_SCHEME,
    time_cost=settings.ARGON2_TIME_COST,
    memory_cost=settings.ARGON2_MEMORY_COST,
)


def hash_password(password: str) -> str:
    return hasher.hash(password)


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    return hasher.verify(plain_password, password_hash)
