# sitecms/routers/activity.py
from __future__ import annotations

from sitecms.core.config import settings
from sitecms.core.responses import success
from sitecms.models.activity import ActivityLogEntry
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import crud
from sitecms.utils.sanitize import sanitize_text

actions = ActionRouter("activity", tags=["Activity"])
router = actions.router


# Chỉ admin được xem nhật ký
@actions.action("list", "GET")
def list_activity(ctx, inp):
    ctx.require_admin()
    q = inp.query
    paging = crud.parse_paging(q, settings.ADMIN_ITEMS_PER_PAGE)
    conds = crud.build_conditions(
        equals={
            ActivityLogEntry.user_id: crud.to_int(q.get("user_id"), "user_id"),
            ActivityLogEntry.action: sanitize_text(q.get("log_action")),
        },
        search=sanitize_text(q.get("search")),
        search_columns=(ActivityLogEntry.action, ActivityLogEntry.details, ActivityLogEntry.ip_address),
    )
    items, pagination = crud.paginate(
        ctx.db, ActivityLogEntry,
        conditions=conds,
        order_by=(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc()),
        paging=paging,
        author_column=ActivityLogEntry.user_id,
        author_label="username",
    )
    return success("Activity retrieved", {"activity": items, "pagination": pagination})
