# sitecms/routers/auth.py
from __future__ import annotations

import logging

from sqlalchemy import or_, select

from sitecms.core.errors import AuthenticationError, NotFoundError, ValidationError
from sitecms.core.responses import success
from sitecms.core.security import hash_password, hasher
from sitecms.db.gateway import fetch_one
from sitecms.models.user import USER_ROLES, User
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.utils.datetime import utcnow
from sitecms.utils.sanitize import sanitize_text, validate_email

log = logging.getLogger("sitecms.auth")

actions = ActionRouter("auth", tags=["Auth"])
router = actions.router


@actions.action("login", "POST")
def login(ctx, inp):
    body = inp.body
    if not body.get("username") or not body.get("password"):
        raise ValidationError("Username and password are required")

    username = sanitize_text(body["username"])
    password = str(body["password"])

    row = fetch_one(
        ctx.db,
        select(User).where(User.username == username, User.is_active.is_(True)),
    )
    user = row[0] if row else None
    # cùng 1 thông báo cho "không có user" và "sai mật khẩu"
    if user is None:
        raise ValidationError("Invalid credentials")
    ok, new_hash = hasher.verify_and_upgrade(password, user.password_hash)
    if not ok:
        raise ValidationError("Invalid credentials")

    # Nâng cấp hash cũ (MD5) sang argon2
    if new_hash:
        user.password_hash = new_hash
        log.info("upgraded password hash for user id=%s", user.id)

    # Ghi nhận thời điểm đăng nhập
    user.last_login_at = utcnow()
    ctx.db.commit()
    ctx.db.refresh(user)

    ctx.login(user)
    log_activity(ctx, "login", "User logged in")
    return success("Login successful", {"user": user.to_dict()})


@actions.action("logout", "POST")
def logout(ctx, inp):
    if ctx.is_authenticated():
        log_activity(ctx, "logout", "User logged out")
    ctx.logout()
    return success("Logout successful")


@actions.action("check", "GET")
def check(ctx, inp):
    if not ctx.is_authenticated():
        raise AuthenticationError("Not authenticated")
    user = ctx.db.get(User, ctx.user_id)
    if user is None or not user.is_active:
        ctx.logout()
        raise AuthenticationError("Not authenticated")
    return success("User authenticated", {"user": user.to_dict(), "is_admin": ctx.is_admin()})


@actions.action("register", "POST")
def register(ctx, inp):
    ctx.require_admin()
    body = inp.body
    crud.require_fields(body, ("username", "password", "email", "full_name"), "All fields are required")

    username = sanitize_text(body["username"])
    email = sanitize_text(body["email"])
    full_name = sanitize_text(body["full_name"])
    role = sanitize_text(body.get("role")) or "editor"
    if not validate_email(email):
        raise ValidationError("Invalid email address")
    crud.require_enum(role, USER_ROLES, "Invalid role")

    existing = fetch_one(
        ctx.db,
        select(User.id).where(or_(User.username == username, User.email == email)),
    )
    if existing:
        raise ValidationError("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(str(body["password"])),
        full_name=full_name,
        role=role,
        is_active=True,
    )
    user_id = crud.create_record(ctx.db, user, "Username or email already exists")
    log_activity(ctx, "register", f"New user registered: {username}")
    return success("User registered successfully", {"user_id": user_id})


def _current_user(ctx) -> User:
    principal = ctx.require_auth()
    user = ctx.db.get(User, principal.id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@actions.action("profile", "GET")
def get_profile(ctx, inp):
    user = _current_user(ctx)
    return success("Profile retrieved", {"user": user.to_dict(with_timestamps=True)})


@actions.action("profile", "PUT")
def update_profile(ctx, inp):
    user = _current_user(ctx)
    body = inp.body
    if not body:
        raise ValidationError("Invalid input data")

    fields = crud.UpdateBuilder(body)
    email = fields.text("email")
    if email:
        if not validate_email(email):
            raise ValidationError("Invalid email address")
        taken = fetch_one(
            ctx.db,
            select(User.id).where(User.email == email, User.id != user.id),
        )
        if taken:
            raise ValidationError("Email already exists")
    fields.text("full_name")
    password = body.get("password")
    if password:
        fields.set("password_hash", hash_password(str(password)))

    crud.apply_update(ctx.db, User, user, fields.result(), "Email already exists")
    log_activity(ctx, "profile_update", "Profile updated")
    return success("Profile updated successfully")
