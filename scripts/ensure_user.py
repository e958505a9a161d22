# scripts/ensure_user.py
"""
Tạo (hoặc đặt lại mật khẩu) tài khoản admin ban đầu.

    python -m scripts.ensure_user admin 'S3cret!' admin@example.com "Site Administrator"
"""
import sys

from sqlalchemy import select

from sitecms.core.security import hash_password
from sitecms.db.session import SessionLocal, init_db
from sitecms.models.user import User


def upsert_admin(db, username, password, email, full_name):
    u = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if u:
        u.password_hash = hash_password(password)
        u.role = "admin"
        u.is_active = True
        if full_name:
            u.full_name = full_name
        if email:
            u.email = email
        return f"UPDATED {username}"

    db.add(User(
        username=username,
        password_hash=hash_password(password),
        role="admin",
        full_name=full_name or username,
        email=email,
        is_active=True,
    ))
    return f"CREATED {username}"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 3:
        print("usage: ensure_user USERNAME PASSWORD EMAIL [FULL_NAME]")
        return 2

    username, password, email = argv[:3]
    full_name = argv[3] if len(argv) > 3 else ""

    engine = init_db()
    print("DB =", engine.url.render_as_string(hide_password=True))
    db = SessionLocal()
    try:
        print(upsert_admin(db, username, password, email, full_name))
        db.commit()
        users = db.execute(select(User)).scalars().all()
        print("Users in DB:", [(x.id, x.username, x.role, x.is_active) for x in users])
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
