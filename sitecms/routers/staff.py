# sitecms/routers/staff.py
from __future__ import annotations

from sitecms.core.errors import ValidationError
from sitecms.core.responses import success
from sitecms.models.content import StaffMember
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.utils.sanitize import sanitize_text, validate_email

actions = ActionRouter("staff", tags=["Staff"])
router = actions.router

ORDER = (StaffMember.sort_order.asc(), StaffMember.full_name.asc())


def _active_filter(q):
    # mặc định chỉ lấy nhân sự đang hoạt động; active_only=false để lấy tất cả
    active_only = crud.parse_bool(q.get("active_only"), True)
    return [StaffMember.is_active.is_(True)] if active_only else []


@actions.action("list", "GET")
def list_staff(ctx, inp):
    q = inp.query
    paging = crud.parse_paging(q, crud.default_limit(ctx))
    conds = crud.build_conditions(
        equals={StaffMember.department: sanitize_text(q.get("department"))},
        search=sanitize_text(q.get("search")),
        search_columns=(StaffMember.full_name, StaffMember.position, StaffMember.department),
        extra=_active_filter(q),
    )
    items, pagination = crud.paginate(
        ctx.db, StaffMember,
        conditions=conds,
        order_by=ORDER,
        paging=paging,
    )
    return success("Staff retrieved", {"staff": items, "pagination": pagination})


@actions.action("get", "GET")
def get_staff(ctx, inp):
    staff_id = crud.parse_id(inp.query.get("id"), "Staff")
    member = crud.get_or_404(ctx.db, StaffMember, staff_id, "Staff member")
    return success("Staff member retrieved", {"staff": member.to_dict()})


@actions.action("create", "POST")
def create_staff(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("full_name", "position"), "Full name and position are required")

    full_name = sanitize_text(body["full_name"])
    email = sanitize_text(body.get("email"))
    if email and not validate_email(email):
        raise ValidationError("Invalid email address")

    member = StaffMember(
        full_name=full_name,
        position=sanitize_text(body["position"]),
        department=sanitize_text(body.get("department")),
        email=email,
        phone=sanitize_text(body.get("phone")),
        bio=sanitize_text(body.get("bio")),
        qualifications=sanitize_text(body.get("qualifications")),
        profile_image=sanitize_text(body.get("profile_image")),
        is_active=bool(crud.parse_bool(body.get("is_active"), True)),
        sort_order=crud.to_int(body.get("sort_order"), "sort_order", 0),
    )
    staff_id = crud.create_record(ctx.db, member)
    log_activity(ctx, "staff_create", f"Staff member created: {full_name}")
    return success("Staff member created successfully", {"staff_id": staff_id})


@actions.action("update", "PUT")
def update_staff(ctx, inp):
    ctx.require_auth()
    body = inp.body
    staff_id = crud.parse_id(body.get("id"), "Staff")
    member = crud.get_or_404(ctx.db, StaffMember, staff_id, "Staff member")
    name = member.full_name

    fields = crud.UpdateBuilder(body)
    fields.text("full_name")
    fields.text("position")
    fields.text("department")
    email = fields.text("email")
    if email and not validate_email(email):
        raise ValidationError("Invalid email address")
    fields.text("phone")
    fields.text("bio")
    fields.text("qualifications")
    fields.text("profile_image")
    fields.boolean("is_active")
    fields.integer("sort_order")

    crud.apply_update(ctx.db, StaffMember, member, fields.result())
    log_activity(ctx, "staff_update", f"Staff member updated: {name}")
    return success("Staff member updated successfully")


@actions.action("delete", "DELETE")
def delete_staff(ctx, inp):
    ctx.require_admin()
    staff_id = crud.parse_id(inp.query.get("id"), "Staff")
    snapshot = crud.delete_by_id(ctx.db, StaffMember, staff_id, "Staff member")
    log_activity(ctx, "staff_delete", f"Staff member deleted: {snapshot['full_name']}")
    return success("Staff member deleted successfully")


@actions.action("by_department", "GET")
def staff_by_department(ctx, inp):
    q = inp.query
    department = sanitize_text(q.get("department"))
    if not department:
        raise ValidationError("Department is required")

    items = crud.list_all(
        ctx.db, StaffMember,
        conditions=[StaffMember.department == department, *_active_filter(q)],
        order_by=ORDER,
    )
    return success("Staff retrieved", {"staff": items})
