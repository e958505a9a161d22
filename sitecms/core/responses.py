# sitecms/core/responses.py
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from sitecms.schemas.common import ErrorEnvelope, SuccessEnvelope


def success(message: str, data: Optional[Any] = None) -> JSONResponse:
    if data is None:
        body = SuccessEnvelope(success=message)
    else:
        body = SuccessEnvelope(success=message, data=jsonable_encoder(data))
    # không truyền data -> không có key "data" trong body
    return JSONResponse(body.model_dump(exclude_unset=True), status_code=200)


def error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(ErrorEnvelope(error=message).model_dump(), status_code=status_code)
