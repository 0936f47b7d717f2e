# chantier/db/enums.py
import enum

# 原始浏览器版本（法语取值）→ 当前取值
LEGACY_VALUES = {
    "ProjectStatus": {"en_attente": "pending", "en_cours": "in_progress", "termine": "done"},
    "TaskStatus": {"en_attente": "pending", "en_cours": "in_progress", "termine": "done"},
    "Priority": {"faible": "low"},
    "ApartmentType": {"appartement": "apartment"},
    "ApartmentStatus": {"libre": "free", "reserve": "reserved", "vendu": "sold"},
    "ContractorStatus": {"actif": "active", "expire": "expired", "suspendu": "suspended"},
    "ReserveStatus": {"ouverte": "open", "en_cours": "in_progress", "resolue": "resolved"},
}

class LegacyValueEnum(str, enum.Enum):
    """str enum that also accepts the French values of old backups."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            mapped = LEGACY_VALUES.get(cls.__name__, {}).get(value.strip().lower())
            if mapped is not None:
                return cls(mapped)
        return None

# Storage keys
class CollectionKey(str, enum.Enum):
    projects = "projects"
    blocks = "blocks"
    apartments = "apartments"
    categories = "categories"
    contractors = "contractors"
    reserves = "reserves"
    tasks = "tasks"
    receptions = "receptions"
    settings = "settings"
    notifications = "notifications"
    notification_settings = "notificationSettings"

# The eight entity collections (backup / erase / demo data)
ENTITY_COLLECTIONS = (
    CollectionKey.projects,
    CollectionKey.blocks,
    CollectionKey.apartments,
    CollectionKey.categories,
    CollectionKey.contractors,
    CollectionKey.reserves,
    CollectionKey.tasks,
    CollectionKey.receptions,
)

# Project / Task related enums
class ProjectStatus(LegacyValueEnum):
    pending = "pending"
    in_progress = "in_progress"
    done = "done"

class TaskStatus(LegacyValueEnum):
    pending = "pending"
    in_progress = "in_progress"
    done = "done"

class Priority(LegacyValueEnum):
    urgent = "urgent"
    normal = "normal"
    low = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]

PRIORITY_RANK = {
    Priority.urgent: 0,
    Priority.normal: 1,
    Priority.low: 2,
}

# Building related enums
class ApartmentType(LegacyValueEnum):
    apartment = "apartment"
    villa = "villa"
    studio = "studio"
    duplex = "duplex"

class ApartmentStatus(LegacyValueEnum):
    free = "free"
    reserved = "reserved"
    sold = "sold"

# Contractor related enums
class ContractorStatus(LegacyValueEnum):
    active = "active"
    expired = "expired"
    suspended = "suspended"

# Reserve related enums
class ReserveStatus(LegacyValueEnum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"

    @property
    def stage(self) -> int:
        return RESERVE_STAGE[self]

RESERVE_STAGE = {
    ReserveStatus.open: 0,
    ReserveStatus.in_progress: 1,
    ReserveStatus.resolved: 2,
}

# Planning related enums
class MoveDirection(str, enum.Enum):
    up = "up"
    down = "down"

class TimeScale(str, enum.Enum):
    day = "day"
    month = "month"
    year = "year"

class BarState(str, enum.Enum):
    done = "done"
    overdue = "overdue"
    in_progress = "in_progress"
    pending = "pending"

# Settings / notification related enums
class Theme(str, enum.Enum):
    light = "light"
    dark = "dark"
    system = "system"

class Language(str, enum.Enum):
    fr = "fr"
    ar = "ar"
    en = "en"
    es = "es"

class NotificationType(str, enum.Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"
    reservation = "reservation"
    reception = "reception"

# QR payload types
class DocumentType(str, enum.Enum):
    pv = "pv"
    reserve = "reserve"
    project = "project"
