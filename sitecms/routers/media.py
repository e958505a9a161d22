# sitecms/routers/media.py
from __future__ import annotations

from sitecms.core.errors import ValidationError
from sitecms.core.responses import success
from sitecms.models.media import MediaAsset
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.services.activity import log_activity
from sitecms.services.uploads import delete_stored_file, public_url, store_upload
from sitecms.utils.sanitize import sanitize_text

actions = ActionRouter("media", tags=["Media"])
router = actions.router

AUTHOR = dict(author_column=MediaAsset.uploaded_by, author_label="uploaded_by_name")
NEWEST = (MediaAsset.created_at.desc(), MediaAsset.id.desc())


def _with_url(item: dict) -> dict:
    item["url"] = public_url(item["file_path"])
    return item


def _type_prefix(value: str):
    # lọc theo tiền tố MIME, vd "image" khớp image/png, image/jpeg
    return [MediaAsset.file_type.like(f"{value}%")] if value else []


@actions.action("upload", "POST")
def upload_media(ctx, inp):
    ctx.require_auth()
    incoming = inp.files.get("file")
    if incoming is None:
        raise ValidationError("No file uploaded")

    alt_text = sanitize_text(inp.body.get("alt_text"))
    caption = sanitize_text(inp.body.get("caption"))
    stored = store_upload(incoming, sanitize_text(inp.body.get("directory")) or "general")

    asset = MediaAsset(
        filename=stored.filename,
        original_name=stored.original_name,
        file_path=stored.file_path,
        file_type=stored.file_type,
        file_size=stored.file_size,
        alt_text=alt_text,
        caption=caption,
        uploaded_by=ctx.user_id,
    )
    try:
        media_id = crud.create_record(ctx.db, asset, "Failed to save file")
    except Exception:
        # không để file mồ côi khi ghi DB thất bại
        delete_stored_file(stored.file_path)
        raise

    log_activity(ctx, "media_upload", f"File uploaded: {stored.original_name}")
    file_info = {
        "id": media_id,
        **stored.to_dict(),
        "alt_text": alt_text,
        "caption": caption,
        "url": public_url(stored.file_path),
    }
    return success("File uploaded successfully", {"media_id": media_id, "file": file_info})


@actions.action("list", "GET")
def list_media(ctx, inp):
    q = inp.query
    paging = crud.parse_paging(q, crud.default_limit(ctx))
    conds = crud.build_conditions(
        search=sanitize_text(q.get("search")),
        search_columns=(MediaAsset.original_name, MediaAsset.alt_text, MediaAsset.caption),
        extra=_type_prefix(sanitize_text(q.get("type"))),
    )
    items, pagination = crud.paginate(
        ctx.db, MediaAsset,
        conditions=conds,
        order_by=NEWEST,
        paging=paging,
        **AUTHOR,
    )
    return success("Media retrieved", {"media": [_with_url(i) for i in items], "pagination": pagination})


@actions.action("get", "GET")
def get_media(ctx, inp):
    item = crud.get_by_id_or_slug(
        ctx.db, MediaAsset,
        ident=inp.query.get("id"),
        label="Media",
        **AUTHOR,
    )
    return success("Media retrieved", {"media": _with_url(item)})


@actions.action("update", "PUT")
def update_media(ctx, inp):
    ctx.require_auth()
    body = inp.body
    media_id = crud.parse_id(body.get("id"), "Media")
    asset = crud.get_or_404(ctx.db, MediaAsset, media_id, "Media")
    original_name = asset.original_name

    fields = crud.UpdateBuilder(body)
    fields.text("alt_text")
    fields.text("caption")

    crud.apply_update(ctx.db, MediaAsset, asset, fields.result())
    log_activity(ctx, "media_update", f"Media updated: {original_name}")
    return success("Media updated successfully")


@actions.action("delete", "DELETE")
def delete_media(ctx, inp):
    ctx.require_auth()
    media_id = crud.parse_id(inp.query.get("id"), "Media")
    snapshot = crud.delete_by_id(ctx.db, MediaAsset, media_id, "Media")
    delete_stored_file(snapshot["file_path"])
    log_activity(ctx, "media_delete", f"Media deleted: {snapshot['original_name']}")
    return success("Media deleted successfully")


@actions.action("by_type", "GET")
def media_by_type(ctx, inp):
    q = inp.query
    file_type = sanitize_text(q.get("type"))
    if not file_type:
        raise ValidationError("Type is required")

    items = crud.list_all(
        ctx.db, MediaAsset,
        conditions=_type_prefix(file_type),
        order_by=NEWEST,
        limit=crud.parse_limit(q, 0),
        **AUTHOR,
    )
    return success("Media retrieved", {"media": [_with_url(i) for i in items]})
