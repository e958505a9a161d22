# sitecms/routers/dispatch.py
"""
Mỗi resource có đúng 1 endpoint: METHOD /<resource>?action=<verb>.

    router = ActionRouter("pages", tags=["Pages"])

    @router.action("list", "GET")
    def list_pages(ctx, inp): ...

- OPTIONS                         -> 200, body rỗng
- action thiếu / không đăng ký    -> 400 "Invalid action"
- action có, sai method           -> 405 "Method not allowed"
- body JSON hỏng                  -> 400 "Invalid input data"
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from starlette.responses import Response

from sitecms.core.context import RequestContext, get_context
from sitecms.core.errors import ApiError, MethodNotAllowedError, UnexpectedError, ValidationError
from sitecms.schemas.common import ErrorEnvelope, SuccessEnvelope
from sitecms.services.uploads import IncomingFile

log = logging.getLogger("sitecms.dispatch")

METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass
class ActionInput:
    query: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    files: Dict[str, IncomingFile] = field(default_factory=dict)


async def read_input(request: Request) -> ActionInput:
    inp = ActionInput(query=dict(request.query_params))
    if request.method in ("GET", "OPTIONS"):
        return inp

    ctype = (request.headers.get("content-type") or "").lower()
    if ctype.startswith(FORM_TYPES):
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                inp.files[key] = IncomingFile(
                    stream=value.file,
                    filename=value.filename or "",
                    size=value.size,
                    content_type=value.content_type,
                )
            else:
                inp.body[key] = value
        return inp

    raw = await request.body()
    if raw.strip():
        try:
            data = json.loads(raw)
        except ValueError:
            raise ValidationError("Invalid input data")
        if not isinstance(data, dict):
            raise ValidationError("Invalid input data")
        inp.body = data
    return inp


Handler = Callable[[RequestContext, ActionInput], Response]


class ActionRouter:
    def __init__(self, resource: str, tags: Optional[List[str]] = None):
        self.resource = resource
        self.handlers: Dict[str, Dict[str, Handler]] = {}
        self.router = APIRouter(tags=tags or [resource.capitalize()])

        def endpoint(
            request: Request,
            ctx: RequestContext = Depends(get_context),
            inp: ActionInput = Depends(read_input),
        ) -> Response:
            return self.dispatch(request.method, ctx, inp)

        endpoint.__name__ = f"{resource}_endpoint"
        self.router.add_api_route(
            f"/{resource}",
            endpoint,
            methods=METHODS,
            responses={
                200: {"model": SuccessEnvelope},
                400: {"model": ErrorEnvelope},
                401: {"model": ErrorEnvelope},
                403: {"model": ErrorEnvelope},
            },
        )

    def action(self, name: str, method: str = "GET"):
        def register(fn: Handler) -> Handler:
            self.handlers.setdefault(name, {})[method.upper()] = fn
            return fn
        return register

    def dispatch(self, method: str, ctx: RequestContext, inp: ActionInput) -> Response:
        if method == "OPTIONS":
            return Response(status_code=200)

        by_method = self.handlers.get(inp.query.get("action") or "")
        if not by_method:
            raise ValidationError("Invalid action")
        handler = by_method.get(method)
        if handler is None:
            raise MethodNotAllowedError()

        try:
            return handler(ctx, inp)
        except ApiError:
            raise
        except Exception as e:
            ctx.db.rollback()
            log.exception(
                "action %s.%s failed (rid=%s)", self.resource, inp.query.get("action"), ctx.request_id
            )
            raise UnexpectedError(str(e)) from e
