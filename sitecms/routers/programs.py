# sitecms/routers/programs.py
from __future__ import annotations

from sitecms.core.errors import ValidationError
from sitecms.core.responses import success
from sitecms.models.content import PROGRAM_LEVELS, PROGRAM_STATUSES, Program
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.utils.sanitize import ensure_scalar, sanitize_text

actions = ActionRouter("programs", tags=["Programs"])
router = actions.router

AUTHOR = dict(author_column=Program.created_by, author_label="created_by_name")
ORDER = (Program.sort_order.asc(), Program.created_at.desc(), Program.id.desc())


@actions.action("list", "GET")
def list_programs(ctx, inp):
    q = inp.query
    paging = crud.parse_paging(q, crud.default_limit(ctx))
    conds = crud.build_conditions(
        equals={
            Program.status: sanitize_text(q.get("status")),
            Program.level: sanitize_text(q.get("level")),
        },
        search=sanitize_text(q.get("search")),
        search_columns=(Program.title, Program.description, Program.content),
    )
    items, pagination = crud.paginate(
        ctx.db, Program,
        conditions=conds,
        order_by=ORDER,
        paging=paging,
        **AUTHOR,
    )
    return success("Programs retrieved", {"programs": items, "pagination": pagination})


@actions.action("get", "GET")
def get_program(ctx, inp):
    program = crud.get_by_id_or_slug(
        ctx.db, Program,
        ident=inp.query.get("id"),
        slug=sanitize_text(inp.query.get("slug")),
        label="Program",
        **AUTHOR,
    )
    return success("Program retrieved", {"program": program})


@actions.action("create", "POST")
def create_program(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("title", "slug", "level"), "Title, slug, and level are required")

    title = sanitize_text(body["title"])
    slug = sanitize_text(body["slug"])
    level = sanitize_text(body["level"])
    status = sanitize_text(body.get("status")) or "active"
    crud.require_enum(level, PROGRAM_LEVELS, "Invalid level")
    crud.require_enum(status, PROGRAM_STATUSES, "Invalid status")
    crud.ensure_slug_free(ctx.db, Program, slug)

    program = Program(
        title=title,
        slug=slug,
        description=sanitize_text(body.get("description")),
        content=ensure_scalar(body.get("content")) or "",
        duration=sanitize_text(body.get("duration")),
        level=level,
        requirements=sanitize_text(body.get("requirements")),
        fees=crud.to_decimal(body.get("fees"), "fees"),
        featured_image=sanitize_text(body.get("featured_image")),
        status=status,
        sort_order=crud.to_int(body.get("sort_order"), "sort_order", 0),
        created_by=ctx.user_id,
    )
    program_id = crud.create_record(ctx.db, program)
    log_activity(ctx, "program_create", f"Created program: {title}")
    return success("Program created successfully", {"program_id": program_id})


@actions.action("update", "PUT")
def update_program(ctx, inp):
    ctx.require_auth()
    body = inp.body
    program_id = crud.parse_id(body.get("id"), "Program")
    program = crud.get_or_404(ctx.db, Program, program_id, "Program")

    fields = crud.UpdateBuilder(body)
    fields.text("title")
    slug = fields.text("slug")
    if slug and slug != program.slug:
        crud.ensure_slug_free(ctx.db, Program, slug, exclude_id=program_id)
    fields.text("description")
    fields.raw("content")
    fields.text("duration")
    fields.text("level", allowed=PROGRAM_LEVELS, message="Invalid level")
    fields.text("requirements")
    fields.decimal("fees")
    fields.text("featured_image")
    fields.text("status", allowed=PROGRAM_STATUSES, message="Invalid status")
    fields.integer("sort_order")

    crud.apply_update(ctx.db, Program, program, fields.result())
    log_activity(ctx, "program_update", f"Updated program ID: {program_id}")
    return success("Program updated successfully")


@actions.action("delete", "DELETE")
def delete_program(ctx, inp):
    ctx.require_admin()
    program_id = crud.parse_id(inp.query.get("id"), "Program")
    snapshot = crud.delete_by_id(ctx.db, Program, program_id, "Program")
    log_activity(ctx, "program_delete", f"Deleted program: {snapshot['title']}")
    return success("Program deleted successfully")


@actions.action("by_level", "GET")
def programs_by_level(ctx, inp):
    q = inp.query
    level = sanitize_text(q.get("level"))
    if not level:
        raise ValidationError("Level is required")
    crud.require_enum(level, PROGRAM_LEVELS, "Invalid level")
    status = sanitize_text(q.get("status")) or "active"

    items = crud.list_all(
        ctx.db, Program,
        conditions=[Program.level == level, Program.status == status],
        order_by=ORDER,
        limit=crud.parse_limit(q, 0),
        **AUTHOR,
    )
    return success("Programs retrieved", {"programs": items})
