# chantier/schemas/entities.py
from datetime import date
from typing import List, Optional

from pydantic import Field

from chantier.db.enums import (
    ApartmentStatus,
    ApartmentType,
    ContractorStatus,
    Language,
    NotificationType,
    Priority,
    ProjectStatus,
    ReserveStatus,
    TaskStatus,
    Theme,
)
from chantier.schemas.base import EntityModel, Timestamp, utcnow


# =========
# 项目 / 楼栋 / 房间
# =========
class Project(EntityModel):
    id: str
    name: str
    description: str = ""
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.pending
    created_at: Timestamp = Field(default_factory=utcnow)


class Block(EntityModel):
    id: str
    project_id: str
    name: str
    description: str = ""
    created_at: Timestamp = Field(default_factory=utcnow)


class Apartment(EntityModel):
    id: str
    block_id: str
    project_id: str  # 冗余字段，与所属楼栋一致
    number: str
    type: ApartmentType = ApartmentType.apartment
    surface: float
    status: ApartmentStatus = ApartmentStatus.free
    created_at: Timestamp = Field(default_factory=utcnow)


# =========
# 工种 / 分包商
# =========
class Category(EntityModel):
    id: str
    name: str
    description: str = ""
    color: str = "#3B82F6"
    created_at: Timestamp = Field(default_factory=utcnow)


class Contractor(EntityModel):
    id: str
    name: str
    email: str = ""
    phone: str = ""
    specialty: str = ""
    project_id: str
    category_ids: List[str] = Field(default_factory=list)
    contract_start: date
    contract_end: date
    status: ContractorStatus = ContractorStatus.active
    created_at: Timestamp = Field(default_factory=utcnow)


# =========
# 保留项（缺陷）
# =========
class Reserve(EntityModel):
    id: str
    project_id: str
    block_id: Optional[str] = None
    apartment_id: Optional[str] = None
    category_id: str
    contractor_id: str
    title: str
    description: str = ""
    images: List[str] = Field(default_factory=list)  # data-URI
    status: ReserveStatus = ReserveStatus.open
    priority: Priority = Priority.normal
    created_at: Timestamp = Field(default_factory=utcnow)
    resolved_at: Optional[Timestamp] = None
    resolution_notes: Optional[str] = None


# =========
# 计划任务
# =========
class Task(EntityModel):
    id: str
    title: str
    description: str = ""
    project_id: str
    assigned_to: str = ""
    start_date: date
    end_date: date
    duration: int = 0  # 天
    status: TaskStatus = TaskStatus.pending
    priority: Priority = Priority.normal
    progress: int = 0
    dependencies: List[str] = Field(default_factory=list)  # 仅提示，不强制
    created_at: Timestamp = Field(default_factory=utcnow)


# =========
# 验收
# =========
class Reception(EntityModel):
    id: str
    project_id: str
    block_id: Optional[str] = None
    category_id: Optional[str] = None
    contractor_id: Optional[str] = None
    pv_number: str = ""
    date: Timestamp
    responsible_parties: List[str] = Field(default_factory=list)
    has_reserves: bool = False
    reserve_count: int = 0
    urgent_count: int = 0
    is_on_time: bool = True
    delay_days: int = 0
    pv_generated: bool = False
    pv_content: str = ""
    created_at: Timestamp = Field(default_factory=utcnow)


# =========
# 设置 / 通知
# =========
class AppSettings(EntityModel):
    theme: Theme = Theme.light
    notifications: bool = True
    language: Language = Language.fr
    compact_mode: bool = False


class Notification(EntityModel):
    id: str
    type: NotificationType = NotificationType.info
    title: str
    description: Optional[str] = None
    timestamp: Timestamp = Field(default_factory=utcnow)
    read: bool = False


class NotificationSettings(EntityModel):
    sound_enabled: bool = True
    browser_notifications: bool = False
    auto_delete: bool = True
    last_check_at: Optional[Timestamp] = None
