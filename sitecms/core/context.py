# sitecms/core/context.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from sitecms.core.errors import AuthenticationError, AuthorizationError
from sitecms.db.session import get_db


@dataclass
class Principal:
    id: int
    username: str
    role: str
    full_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class RequestContext:
    """Mọi thứ một handler cần cho 1 request: DB, request gốc, người dùng đang đăng nhập."""

    db: Session
    request: Request
    principal: Optional[Principal] = None
    request_id: Optional[str] = None
    ip_address: str = "unknown"
    background: Optional[BackgroundTasks] = None

    # ---------- predicates ----------
    def is_authenticated(self) -> bool:
        return self.principal is not None and bool(self.principal.id)

    def is_admin(self) -> bool:
        return self.is_authenticated() and self.principal.is_admin

    # ---------- guards ----------
    def require_auth(self) -> Principal:
        if not self.is_authenticated():
            raise AuthenticationError("Authentication required")
        return self.principal

    def require_admin(self) -> Principal:
        principal = self.require_auth()
        if not principal.is_admin:
            raise AuthorizationError("Admin access required")
        return principal

    @property
    def user_id(self) -> Optional[int]:
        return self.principal.id if self.principal else None

    # ---------- session ----------
    def login(self, user) -> Principal:
        sess = self.request.session
        sess.clear()
        sess["uid"] = user.id
        sess["username"] = user.username
        sess["role"] = user.role
        sess["full_name"] = user.full_name or user.username
        sess["login_time"] = int(time.time())
        self.principal = Principal(
            id=user.id, username=user.username, role=user.role, full_name=user.full_name
        )
        return self.principal

    def logout(self) -> None:
        self.request.session.clear()
        self.principal = None


def principal_from_session(request: Request) -> Optional[Principal]:
    if "session" not in request.scope:
        return None
    sess = request.session
    uid = sess.get("uid")
    if not uid:
        return None
    return Principal(
        id=int(uid),
        username=sess.get("username") or "",
        role=sess.get("role") or "",
        full_name=sess.get("full_name"),
    )


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_context(
    request: Request,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
) -> RequestContext:
    return RequestContext(
        db=db,
        request=request,
        principal=principal_from_session(request),
        request_id=getattr(request.state, "request_id", None),
        ip_address=client_ip(request),
        background=background,
    )
