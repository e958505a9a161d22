# Aggregator: cho phép "from sitecms.models import Page, NewsItem, User, ..."

from sitecms.db.base import Base

from .user import User, USER_ROLES
from .content import (
    Page, NewsItem, Program, StaffMember,
    PAGE_STATUSES, NEWS_STATUSES, PROGRAM_STATUSES, PROGRAM_LEVELS,
)
from .media import MediaAsset
from .contact import ContactMessage, AdmissionApplication, CONTACT_STATUSES, ADMISSION_STATUSES
from .setting import Setting
from .activity import ActivityLogEntry

__all__ = [
    "Base",
    "User",
    "Page",
    "NewsItem",
    "Program",
    "StaffMember",
    "MediaAsset",
    "ContactMessage",
    "AdmissionApplication",
    "Setting",
    "ActivityLogEntry",
    "USER_ROLES",
    "PAGE_STATUSES",
    "NEWS_STATUSES",
    "PROGRAM_STATUSES",
    "PROGRAM_LEVELS",
    "CONTACT_STATUSES",
    "ADMISSION_STATUSES",
]
