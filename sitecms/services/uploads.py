# sitecms/services/uploads.py
from __future__ import annotations

import logging
import os
import re
import secrets
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from sitecms.core.config import settings
from sitecms.core.errors import ValidationError

log = logging.getLogger("sitecms.uploads")

# nhãn thư mục con: chữ, số, '-', '_' và '/' (không cho '..')
DIR_LABEL_RE = re.compile(r"^[A-Za-z0-9_\-]+(?:/[A-Za-z0-9_\-]+)*$")


class UploadError(ValidationError):
    pass


@dataclass
class IncomingFile:
    """File nhận từ multipart: stream + thông tin client khai báo."""

    stream: Optional[BinaryIO]
    filename: str
    size: Optional[int]
    content_type: Optional[str]
    error: Optional[str] = None


@dataclass
class StoredFile:
    filename: str
    file_path: str
    original_name: str
    file_type: Optional[str]
    file_size: int

    def to_dict(self):
        return {
            "filename": self.filename,
            "file_path": self.file_path,
            "original_name": self.original_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
        }


def upload_root() -> Path:
    return Path(settings.UPLOAD_ROOT)


def normalize_directory(label: Optional[str]) -> str:
    label = (label or "").strip().strip("/") or "general"
    if not DIR_LABEL_RE.fullmatch(label):
        raise UploadError("Invalid upload directory")
    return label


def file_extension(name: str) -> str:
    return os.path.splitext(name or "")[1].lstrip(".").lower()


def unique_filename(ext: str) -> str:
    # timestamp + token ngẫu nhiên: không trùng trong cùng tiến trình
    return f"{int(time.time())}_{secrets.token_hex(8)}.{ext}"


def _measure(stream: BinaryIO) -> int:
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def store_upload(incoming: IncomingFile, directory: str = "general") -> StoredFile:
    """
    Kiểm tra theo thứ tự: lỗi truyền file -> dung lượng -> phần mở rộng.
    Hợp lệ thì ghi file vào UPLOAD_ROOT/<directory>/<tên mới>.
    """
    if incoming.error or incoming.stream is None:
        raise UploadError("File upload failed")

    size = incoming.size if incoming.size is not None else _measure(incoming.stream)
    if size > settings.MAX_FILE_SIZE:
        raise UploadError("File too large")

    ext = file_extension(incoming.filename)
    if not ext or ext not in settings.allowed_extensions:
        raise UploadError("Invalid file type")

    directory = normalize_directory(directory)
    dest_dir = upload_root() / directory
    dest_dir.mkdir(parents=True, exist_ok=True)

    filename = unique_filename(ext)
    dest = dest_dir / filename
    try:
        incoming.stream.seek(0)
        with open(dest, "xb") as out:
            shutil.copyfileobj(incoming.stream, out)
    except OSError as e:
        log.error("failed to save upload %s: %s", dest, e)
        raise UploadError("Failed to save file") from e

    return StoredFile(
        filename=filename,
        file_path=f"{directory}/{filename}",
        original_name=incoming.filename,
        file_type=incoming.content_type,
        file_size=size,
    )


def delete_stored_file(file_path: Optional[str]) -> bool:
    """Xoá file vật lý (best-effort); file không tồn tại không phải lỗi."""
    if not file_path:
        return True
    root = upload_root().resolve()
    target = (root / file_path).resolve()
    if root not in target.parents:
        log.warning("refusing to delete path outside upload root: %s", file_path)
        return False
    try:
        target.unlink()
    except FileNotFoundError:
        return True
    except OSError as e:
        log.warning("could not delete %s: %s", target, e)
        return False
    return True


def public_url(file_path: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/uploads/{file_path}"
