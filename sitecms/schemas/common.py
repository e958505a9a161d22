# sitecms/schemas/common.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ========= Envelope =========
class SuccessEnvelope(BaseModel):
    success: str
    data: Optional[Any] = None


class ErrorEnvelope(BaseModel):
    error: str


# ========= Phân trang =========
class Pagination(BaseModel):
    current_page: int = Field(ge=1)
    # ceil(total_items / items_per_page); 0 khi không có bản ghi
    total_pages: int = Field(ge=0)
    total_items: int = Field(ge=0)
    items_per_page: int = Field(ge=1)
