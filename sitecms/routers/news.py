# sitecms/routers/news.py
from __future__ import annotations

from sitecms.core.responses import success
from sitecms.models.content import NEWS_STATUSES, NewsItem
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.utils.datetime import utcnow
from sitecms.utils.sanitize import ensure_scalar, sanitize_text

actions = ActionRouter("news", tags=["News"])
router = actions.router

AUTHOR = dict(author_column=NewsItem.created_by, author_label="created_by_name")
NEWEST = (NewsItem.published_at.desc(), NewsItem.created_at.desc(), NewsItem.id.desc())


@actions.action("list", "GET")
def list_news(ctx, inp):
    q = inp.query
    paging = crud.parse_paging(q, crud.default_limit(ctx))
    conds = crud.build_conditions(
        equals={
            NewsItem.status: sanitize_text(q.get("status")),
            NewsItem.is_featured: crud.parse_bool(q.get("featured")),
        },
        search=sanitize_text(q.get("search")),
        search_columns=(NewsItem.title, NewsItem.content, NewsItem.excerpt),
    )
    items, pagination = crud.paginate(
        ctx.db, NewsItem,
        conditions=conds,
        order_by=NEWEST,
        paging=paging,
        **AUTHOR,
    )
    return success("News retrieved", {"news": items, "pagination": pagination})


@actions.action("get", "GET")
def get_news(ctx, inp):
    item = crud.get_by_id_or_slug(
        ctx.db, NewsItem,
        ident=inp.query.get("id"),
        slug=sanitize_text(inp.query.get("slug")),
        label="News",
        **AUTHOR,
    )
    return success("News retrieved", {"news": item})


@actions.action("create", "POST")
def create_news(ctx, inp):
    ctx.require_auth()
    body = inp.body
    crud.require_fields(body, ("title", "slug"), "Title and slug are required")

    title = sanitize_text(body["title"])
    slug = sanitize_text(body["slug"])
    status = sanitize_text(body.get("status")) or "draft"
    crud.require_enum(status, NEWS_STATUSES, "Invalid status")
    crud.ensure_slug_free(ctx.db, NewsItem, slug)

    published_at = crud.to_datetime(body.get("published_at"), "published_at")
    if status == "published" and published_at is None:
        published_at = utcnow()

    item = NewsItem(
        title=title,
        slug=slug,
        content=ensure_scalar(body.get("content")) or "",
        excerpt=sanitize_text(body.get("excerpt")),
        featured_image=sanitize_text(body.get("featured_image")),
        status=status,
        is_featured=bool(crud.parse_bool(body.get("is_featured"), False)),
        published_at=published_at,
        created_by=ctx.user_id,
    )
    news_id = crud.create_record(ctx.db, item)
    log_activity(ctx, "news_create", f"Created news: {title}")
    return success("News created successfully", {"news_id": news_id})


@actions.action("update", "PUT")
def update_news(ctx, inp):
    ctx.require_auth()
    body = inp.body
    news_id = crud.parse_id(body.get("id"), "News")
    item = crud.get_or_404(ctx.db, NewsItem, news_id, "News")

    fields = crud.UpdateBuilder(body)
    fields.text("title")
    slug = fields.text("slug")
    if slug and slug != item.slug:
        crud.ensure_slug_free(ctx.db, NewsItem, slug, exclude_id=news_id)
    fields.raw("content")
    fields.text("excerpt")
    fields.text("featured_image")
    status = fields.text("status", allowed=NEWS_STATUSES, message="Invalid status")
    fields.boolean("is_featured")
    published_at = fields.datetime("published_at")

    # chuyển sang published mà không kèm ngày -> lấy thời điểm hiện tại
    if status == "published" and published_at is None:
        if item.status != "published" or item.published_at is None:
            fields.set("published_at", utcnow())

    crud.apply_update(ctx.db, NewsItem, item, fields.result())
    log_activity(ctx, "news_update", f"Updated news ID: {news_id}")
    return success("News updated successfully")


@actions.action("delete", "DELETE")
def delete_news(ctx, inp):
    ctx.require_admin()
    news_id = crud.parse_id(inp.query.get("id"), "News")
    snapshot = crud.delete_by_id(ctx.db, NewsItem, news_id, "News")
    log_activity(ctx, "news_delete", f"Deleted news: {snapshot['title']}")
    return success("News deleted successfully")


@actions.action("featured", "GET")
def featured_news(ctx, inp):
    items = crud.list_all(
        ctx.db, NewsItem,
        conditions=[NewsItem.status == "published", NewsItem.is_featured.is_(True)],
        order_by=NEWEST,
        limit=crud.parse_limit(inp.query, 3),
        **AUTHOR,
    )
    return success("Featured news retrieved", {"news": items})


@actions.action("recent", "GET")
def recent_news(ctx, inp):
    items = crud.list_all(
        ctx.db, NewsItem,
        conditions=[NewsItem.status == "published"],
        order_by=NEWEST,
        limit=crud.parse_limit(inp.query, 6),
        **AUTHOR,
    )
    return success("Recent news retrieved", {"news": items})
