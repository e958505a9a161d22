# sitecms/routers/settings.py
from __future__ import annotations

from sitecms.core.errors import NotFoundError, ValidationError
from sitecms.core.responses import success
from sitecms.routers.dispatch import ActionRouter
from sitecms.services import settings_store
from sitecms.services.activity import log_activity
from sitecms.utils.sanitize import sanitize_text

actions = ActionRouter("settings", tags=["Settings"])
router = actions.router


@actions.action("get", "GET")
def get_settings(ctx, inp):
    return success("Settings retrieved", {"settings": settings_store.all_settings(ctx.db)})


@actions.action("get_by_key", "GET")
def get_setting_by_key(ctx, inp):
    key = sanitize_text(inp.query.get("key"))
    if not key:
        raise ValidationError("Setting key is required")
    setting = settings_store.find_setting(ctx.db, key)
    if setting is None:
        raise NotFoundError("Setting not found")
    return success("Setting retrieved", {"setting": setting.to_dict()})


@actions.action("update", "PUT")
def update_settings(ctx, inp):
    ctx.require_auth()
    values = inp.body.get("settings")
    if not isinstance(values, dict) or not values:
        raise ValidationError("Settings data is required")

    updated, errors = settings_store.bulk_update(ctx.db, {sanitize_text(k): v for k, v in values.items()})
    if updated == 0:
        raise ValidationError("No settings were updated")

    log_activity(ctx, "settings_update", f"Updated {updated} settings")
    if errors:
        return success("Settings updated with some errors", {"updated": updated, "errors": errors})
    return success("All settings updated successfully", {"updated": updated})


@actions.action("update_by_key", "PUT")
def update_setting_by_key(ctx, inp):
    ctx.require_auth()
    body = inp.body
    key = sanitize_text(body.get("key"))
    if not key or body.get("value") is None:
        raise ValidationError("Setting key and value are required")

    settings_store.update_setting(ctx.db, key, body["value"])
    log_activity(ctx, "setting_update", f"Setting updated: {key}")
    return success("Setting updated successfully")
