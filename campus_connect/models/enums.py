from enum import Enum


class IdentityRole(str, Enum):
    User = "user"                # student
    Admin = "admin"              # department president officer
    SuperAdmin = "super_admin"   # department program head


class ApprovalState(str, Enum):
    Pending = "pending"
    Approved = "approved"


class PostType(str, Enum):
    Announcement = "announcement"
    Event = "event"


class PostStatus(str, Enum):
    Active = "active"
    Archived = "archived"


class PostView(str, Enum):
    Feed = "feed"
    Archive = "archive"
    Manage = "manage"


def enum_values(enum_cls):
    # Persist enum values ("super_admin"), not member names ("SuperAdmin")
    return [member.value for member in enum_cls]
