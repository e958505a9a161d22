# sitecms/routers/admissions.py
"""
Nhận đơn đăng ký nhập học từ website công khai.
Việc dựng PDF + gửi email do dịch vụ bên ngoài làm, nhận qua kênh thông báo.
"""
from __future__ import annotations

from datetime import date

from sitecms.core.config import settings
from sitecms.core.errors import ValidationError
from sitecms.core.responses import success
from sitecms.models.contact import ADMISSION_STATUSES, AdmissionApplication
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.services.notifications import notify
from sitecms.services.settings_store import get_setting
from sitecms.utils.datetime import now_str
from sitecms.utils.sanitize import sanitize_text, validate_email

actions = ActionRouter("admissions", tags=["Admissions"])
router = actions.router

REQUIRED_MESSAGE = "Student name, parent name, email, phone, and program are required"


def _parse_dob(raw) -> date | None:
    raw = sanitize_text(raw)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError("Invalid date of birth")


@actions.action("submit", "POST")
def submit_application(ctx, inp):
    body = inp.body
    if not body:
        raise ValidationError("Invalid input data")

    student_name = sanitize_text(body.get("student_name"))
    parent_name = sanitize_text(body.get("parent_name"))
    email = sanitize_text(body.get("email"))
    phone = sanitize_text(body.get("phone"))
    # "program" là tên field cũ của form công khai
    level = sanitize_text(body.get("level_applying") or body.get("program"))
    if not all((student_name, parent_name, email, phone, level)):
        raise ValidationError(REQUIRED_MESSAGE)
    if not validate_email(email):
        raise ValidationError("Invalid email address")

    row = AdmissionApplication(
        student_name=student_name,
        date_of_birth=_parse_dob(body.get("date_of_birth")),
        parent_name=parent_name,
        email=email,
        phone=phone,
        level_applying=level,
        message=sanitize_text(body.get("message")),
        ip_address=ctx.ip_address,
    )
    application_id = crud.create_record(ctx.db, row)

    notify(
        ctx,
        "admission_application",
        {
            "subject": "New Admission Application",
            "application_id": application_id,
            **row.to_dict(),
            "time": now_str(),
        },
        recipient=get_setting(ctx.db, "admissions_email", settings.ADMIN_EMAIL),
    )
    return success(
        "Application submitted successfully. We will contact you soon!",
        {"application_id": application_id},
    )


@actions.action("list", "GET")
def list_applications(ctx, inp):
    ctx.require_auth()
    q = inp.query
    paging = crud.parse_paging(q, settings.ADMIN_ITEMS_PER_PAGE)
    conds = crud.build_conditions(
        equals={
            AdmissionApplication.status: sanitize_text(q.get("status")),
            AdmissionApplication.level_applying: sanitize_text(q.get("level")),
        },
        search=sanitize_text(q.get("search")),
        search_columns=(
            AdmissionApplication.student_name,
            AdmissionApplication.parent_name,
            AdmissionApplication.email,
        ),
    )
    items, pagination = crud.paginate(
        ctx.db, AdmissionApplication,
        conditions=conds,
        order_by=(AdmissionApplication.created_at.desc(), AdmissionApplication.id.desc()),
        paging=paging,
    )
    return success("Applications retrieved", {"applications": items, "pagination": pagination})


@actions.action("get", "GET")
def get_application(ctx, inp):
    ctx.require_auth()
    app_id = crud.parse_id(inp.query.get("id"), "Application")
    row = crud.get_or_404(ctx.db, AdmissionApplication, app_id, "Application")
    return success("Application retrieved", {"application": row.to_dict()})


@actions.action("update_status", "PUT")
def update_status(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("id", "status"), "Application ID and status are required")
    app_id = crud.parse_id(body["id"], "Application")
    status = sanitize_text(body["status"])
    crud.require_enum(status, ADMISSION_STATUSES, "Invalid status")

    row = crud.get_or_404(ctx.db, AdmissionApplication, app_id, "Application")
    student = row.student_name
    crud.apply_update(ctx.db, AdmissionApplication, row, {"status": status})
    log_activity(ctx, "admission_status_update", f"Application status updated to {status}: {student}")
    return success("Application status updated successfully")
