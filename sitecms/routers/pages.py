# sitecms/routers/pages.py
from __future__ import annotations

from sitecms.core.responses import success
from sitecms.models.content import PAGE_STATUSES, Page
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.utils.sanitize import ensure_scalar, sanitize_text

actions = ActionRouter("pages", tags=["Pages"])
router = actions.router

AUTHOR = dict(author_column=Page.created_by, author_label="created_by_name")


@actions.action("list", "GET")
def list_pages(ctx, inp):
    q = inp.query
    paging = crud.parse_paging(q, crud.default_limit(ctx))
    conds = crud.build_conditions(
        equals={Page.status: sanitize_text(q.get("status"))},
        search=sanitize_text(q.get("search")),
        search_columns=(Page.title, Page.content),
    )
    items, pagination = crud.paginate(
        ctx.db, Page,
        conditions=conds,
        order_by=(Page.created_at.desc(), Page.id.desc()),
        paging=paging,
        **AUTHOR,
    )
    return success("Pages retrieved", {"pages": items, "pagination": pagination})


@actions.action("get", "GET")
def get_page(ctx, inp):
    page = crud.get_by_id_or_slug(
        ctx.db, Page,
        ident=inp.query.get("id"),
        slug=sanitize_text(inp.query.get("slug")),
        label="Page",
        **AUTHOR,
    )
    return success("Page retrieved", {"page": page})


@actions.action("create", "POST")
def create_page(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("title", "slug"), "Title and slug are required")

    title = sanitize_text(body["title"])
    slug = sanitize_text(body["slug"])
    status = sanitize_text(body.get("status")) or "draft"
    crud.require_enum(status, PAGE_STATUSES, "Invalid status")
    crud.ensure_slug_free(ctx.db, Page, slug)

    page = Page(
        title=title,
        slug=slug,
        content=ensure_scalar(body.get("content")) or "",
        meta_description=sanitize_text(body.get("meta_description")),
        meta_keywords=sanitize_text(body.get("meta_keywords")),
        status=status,
        template=sanitize_text(body.get("template")) or "default",
        sort_order=crud.to_int(body.get("sort_order"), "sort_order", 0),
        created_by=ctx.user_id,
    )
    page_id = crud.create_record(ctx.db, page)
    log_activity(ctx, "page_create", f"Created page: {title}")
    return success("Page created successfully", {"page_id": page_id})


@actions.action("update", "PUT")
def update_page(ctx, inp):
    ctx.require_auth()
    body = inp.body
    page_id = crud.parse_id(body.get("id"), "Page")
    page = crud.get_or_404(ctx.db, Page, page_id, "Page")

    fields = crud.UpdateBuilder(body)
    fields.text("title")
    slug = fields.text("slug")
    if slug and slug != page.slug:
        crud.ensure_slug_free(ctx.db, Page, slug, exclude_id=page_id)
    fields.raw("content")
    fields.text("meta_description")
    fields.text("meta_keywords")
    fields.text("status", allowed=PAGE_STATUSES, message="Invalid status")
    fields.text("template")
    fields.integer("sort_order")

    crud.apply_update(ctx.db, Page, page, fields.result())
    log_activity(ctx, "page_update", f"Updated page ID: {page_id}")
    return success("Page updated successfully")


@actions.action("delete", "DELETE")
def delete_page(ctx, inp):
    ctx.require_admin()
    page_id = crud.parse_id(inp.query.get("id"), "Page")
    snapshot = crud.delete_by_id(ctx.db, Page, page_id, "Page")
    log_activity(ctx, "page_delete", f"Deleted page: {snapshot['title']}")
    return success("Page deleted successfully")


@actions.action("publish", "POST")
def publish_page(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("id", "status"), "Page ID and status are required")
    page_id = crud.parse_id(body["id"], "Page")
    status = sanitize_text(body["status"])
    crud.require_enum(status, PAGE_STATUSES, "Invalid status")

    page = crud.get_or_404(ctx.db, Page, page_id, "Page")
    crud.apply_update(ctx.db, Page, page, {"status": status})
    log_activity(ctx, "page_publish", f"Changed page status to: {status}")
    return success("Page status updated successfully")
