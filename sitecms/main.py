# sitecms/main.py
import logging
import uuid
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from sitecms.core.config import settings
from sitecms.core.errors import register_error_handlers
from sitecms.core.logging import request_id_context, setup_logging
from sitecms.db.session import init_db

# Routers
from sitecms.routers import health, auth, activity
from sitecms.routers import pages, news, programs, staff, media, settings as settings_router
from sitecms.routers import contact, admissions

setup_logging(settings.LOG_LEVEL)
log = logging.getLogger("sitecms")

app = FastAPI(title=settings.SITE_NAME)

# ---------------- Session cookie ----------------
# max_age = thời gian sống của phiên; hết hạn -> coi như chưa đăng nhập
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
)

# ---------------- CORS ----------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ---------------- Request-ID ----------------
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = rid
    token = request_id_context.set(rid)
    try:
        resp = await call_next(request)
    finally:
        request_id_context.reset(token)
    resp.headers["X-Request-ID"] = rid
    return resp


register_error_handlers(app)

# ---------------- Mount routers ----------------
RESOURCE_ROUTERS = (
    pages.router,
    news.router,
    programs.router,
    staff.router,
    media.router,
    settings_router.router,
    auth.router,
    contact.router,
    admissions.router,
    activity.router,
    health.router,
)

# API chuẩn
for r in RESOURCE_ROUTERS:
    app.include_router(r, prefix="/api")

# Alias không /api (ẩn khỏi docs)
for r in RESOURCE_ROUTERS:
    app.include_router(r, prefix="", include_in_schema=False)

# ---------------- File upload công khai ----------------
app.mount(
    "/uploads",
    StaticFiles(directory=Path(settings.UPLOAD_ROOT), check_dir=False),
    name="uploads",
)


# ---------------- Startup ----------------
@app.on_event("startup")
def startup():
    Path(settings.UPLOAD_ROOT).mkdir(parents=True, exist_ok=True)
    init_db()
    log.info("%s started", settings.SITE_NAME)
