# sitecms/routers/contact.py
from __future__ import annotations

from datetime import timedelta

from sqlalchemy import func, select, update

from sitecms.core.config import settings
from sitecms.core.errors import ValidationError
from sitecms.core.responses import success
from sitecms.db.gateway import execute_write, fetch_scalar
from sitecms.models.contact import CONTACT_STATUSES, ContactMessage
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.services.notifications import notify
from sitecms.services.settings_store import get_setting
from sitecms.utils.datetime import months_ago, now_str, utcnow
from sitecms.utils.sanitize import sanitize_text, validate_email

actions = ActionRouter("contact", tags=["Contact"])
router = actions.router


@actions.action("submit", "POST")
def submit_message(ctx, inp):
    body = inp.body
    if not body:
        raise ValidationError("Invalid input data")

    name = sanitize_text(body.get("name"))
    email = sanitize_text(body.get("email"))
    message = sanitize_text(body.get("message"))
    if not name or not email or not message:
        raise ValidationError("Name, email, and message are required")
    if not validate_email(email):
        raise ValidationError("Invalid email address")

    row = ContactMessage(
        name=name,
        email=email,
        phone=sanitize_text(body.get("phone")),
        subject=sanitize_text(body.get("subject")),
        message=message,
        ip_address=ctx.ip_address,
    )
    message_id = crud.create_record(ctx.db, row)

    site_name = get_setting(ctx.db, "site_title", settings.SITE_NAME)
    notify(
        ctx,
        "contact_message",
        {
            "subject": f"New Contact Message - {site_name}",
            "message_id": message_id,
            "name": name,
            "email": email,
            "phone": row.phone,
            "message_subject": row.subject,
            "message": message,
            "ip_address": ctx.ip_address,
            "time": now_str(),
        },
        recipient=get_setting(ctx.db, "contact_email", settings.ADMIN_EMAIL),
    )
    return success(
        "Message sent successfully. We will get back to you soon!",
        {"message_id": message_id},
    )


@actions.action("list", "GET")
def list_messages(ctx, inp):
    ctx.require_auth()
    q = inp.query
    paging = crud.parse_paging(q, settings.ADMIN_ITEMS_PER_PAGE)
    conds = crud.build_conditions(
        equals={ContactMessage.status: sanitize_text(q.get("status"))},
        search=sanitize_text(q.get("search")),
        search_columns=(
            ContactMessage.name, ContactMessage.email,
            ContactMessage.subject, ContactMessage.message,
        ),
    )
    items, pagination = crud.paginate(
        ctx.db, ContactMessage,
        conditions=conds,
        order_by=(ContactMessage.created_at.desc(), ContactMessage.id.desc()),
        paging=paging,
    )
    return success("Messages retrieved", {"messages": items, "pagination": pagination})


@actions.action("get", "GET")
def get_message(ctx, inp):
    ctx.require_auth()
    message_id = crud.parse_id(inp.query.get("id"), "Message")
    row = crud.get_or_404(ctx.db, ContactMessage, message_id, "Message")
    data = row.to_dict()

    # đọc lần đầu: response giữ "new", DB chuyển sang "read" cho các lần sau
    if row.status == "new":
        execute_write(
            ctx.db,
            update(ContactMessage)
            .where(ContactMessage.id == message_id, ContactMessage.status == "new")
            .values(status="read")
            .execution_options(synchronize_session=False),
        )
    return success("Message retrieved", {"message": data})


@actions.action("update_status", "PUT")
def update_status(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("id", "status"), "Message ID and status are required")
    message_id = crud.parse_id(body["id"], "Message")
    status = sanitize_text(body["status"])
    crud.require_enum(status, CONTACT_STATUSES, "Invalid status")

    row = crud.get_or_404(ctx.db, ContactMessage, message_id, "Message")
    name = row.name
    crud.apply_update(ctx.db, ContactMessage, row, {"status": status})
    log_activity(ctx, "contact_status_update", f"Message status updated to {status}: {name}")
    return success("Message status updated successfully")


@actions.action("delete", "DELETE")
def delete_message(ctx, inp):
    ctx.require_admin()
    message_id = crud.parse_id(inp.query.get("id"), "Message")
    snapshot = crud.delete_by_id(ctx.db, ContactMessage, message_id, "Message")
    log_activity(ctx, "contact_delete", f"Message deleted: {snapshot['name']}")
    return success("Message deleted successfully")


def _count(db, *conds) -> int:
    stmt = select(func.count()).select_from(ContactMessage)
    if conds:
        stmt = stmt.where(*conds)
    return int(fetch_scalar(db, stmt, 0))


@actions.action("stats", "GET")
def stats(ctx, inp):
    ctx.require_auth()
    now = utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    data = {"total": _count(ctx.db)}
    for status in CONTACT_STATUSES:
        data[status] = _count(ctx.db, ContactMessage.status == status)
    data["today"] = _count(ctx.db, ContactMessage.created_at >= today)
    data["this_week"] = _count(ctx.db, ContactMessage.created_at >= now - timedelta(weeks=1))
    data["this_month"] = _count(ctx.db, ContactMessage.created_at >= months_ago(now))
    return success("Statistics retrieved", {"stats": data})
