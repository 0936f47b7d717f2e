# chantier/schemas/forms.py
"""Form models: the only place where required fields and value ranges are checked."""
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import Field, ValidationError, field_validator, model_validator

from chantier.db.enums import (
    ApartmentStatus,
    ApartmentType,
    ContractorStatus,
    Language,
    MoveDirection,
    Priority,
    ProjectStatus,
    ReserveStatus,
    TaskStatus,
    Theme,
    TimeScale,
)
from chantier.errors import FormValidationError
from chantier.schemas.base import FormModel

F = TypeVar("F", bound=FormModel)

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


def parse_form(form_cls: Type[F], payload: Optional[Dict[str, Any]]) -> F:
    """Validate ``payload`` against ``form_cls``; pydantic errors become FormValidationError."""
    try:
        return form_cls.model_validate(payload or {})
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        fields = ", ".join(err["field"] for err in errors) or form_cls.__name__
        raise FormValidationError(f"Invalid or missing fields: {fields}", errors) from e


def _check_date_range(start: date, end: date, label: str):
    if end < start:
        raise ValueError(f"{label} end date must not be before its start date")


class QueryForm(FormModel):
    """Query-string filters; "all" or an empty value means no filter."""

    @model_validator(mode="before")
    @classmethod
    def _drop_all(cls, data):
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v not in ("", "all", None)}
        return data


class ProjectForm(FormModel):
    name: str = Field(min_length=1)
    description: str = ""
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.pending

    @model_validator(mode="after")
    def _dates(self):
        _check_date_range(self.start_date, self.end_date, "Project")
        return self


class BlockForm(FormModel):
    project_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""


class ApartmentForm(FormModel):
    block_id: str = Field(min_length=1)
    project_id: Optional[str] = None  # 楼栋不存在时使用
    number: str = Field(min_length=1)
    type: ApartmentType = ApartmentType.apartment
    surface: float = Field(gt=0)
    status: ApartmentStatus = ApartmentStatus.free


class CategoryForm(FormModel):
    name: str = Field(min_length=1)
    description: str = ""
    color: str = Field(default="#3B82F6", pattern=HEX_COLOR)


class ContractorForm(FormModel):
    name: str = Field(min_length=1)
    email: str = ""
    phone: str = ""
    specialty: str = ""
    project_id: str = Field(min_length=1)
    category_ids: List[str] = Field(default_factory=list)
    contract_start: date
    contract_end: date
    status: ContractorStatus = ContractorStatus.active

    @model_validator(mode="after")
    def _dates(self):
        _check_date_range(self.contract_start, self.contract_end, "Contract")
        return self


class ReserveForm(FormModel):
    project_id: str = Field(min_length=1)
    block_id: Optional[str] = None
    apartment_id: Optional[str] = None
    category_id: str = Field(min_length=1)
    contractor_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    images: List[str] = Field(default_factory=list)
    priority: Priority = Priority.normal

    @field_validator("block_id", "apartment_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # 下拉框的 "none" / 空字符串表示未选择
        if value in ("", "none"):
            return None
        return value


class ResolveForm(FormModel):
    notes: Optional[str] = None


class TaskForm(FormModel):
    title: str = Field(min_length=1)
    description: str = ""
    project_id: str = Field(min_length=1)
    assigned_to: str = ""
    start_date: date
    end_date: date
    status: TaskStatus = TaskStatus.pending
    priority: Priority = Priority.normal
    duration: Optional[int] = Field(default=None, ge=1)  # 天；为空时按起止日期计算
    progress: int = Field(default=0, ge=0, le=100)
    dependencies: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _dates(self):
        _check_date_range(self.start_date, self.end_date, "Task")
        return self


class MoveTaskForm(QueryForm):
    direction: MoveDirection
    priority: Optional[Priority] = None
    project_id: Optional[str] = None
    status: Optional[TaskStatus] = None


class GanttForm(QueryForm):
    scale: TimeScale = TimeScale.month
    priority: Optional[Priority] = None
    project_id: Optional[str] = None
    status: Optional[TaskStatus] = None


class ReceptionForm(FormModel):
    project_id: str = Field(min_length=1)
    block_ids: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    contractor_id: Optional[str] = None
    responsible_parties: List[str] = Field(default_factory=list)

    @field_validator("category_id", "contractor_id", mode="before")
    @classmethod
    def _all_to_none(cls, value):
        # "all" 表示不过滤
        if value in ("", "all"):
            return None
        return value

    @field_validator("responsible_parties", mode="before")
    @classmethod
    def _split_parties(cls, value):
        # 表单里是逗号分隔的文本
        if isinstance(value, str):
            value = value.split(",")
        return [p.strip() for p in value if p and p.strip()]


class ReceptionEditForm(FormModel):
    responsible_parties: List[str]

    @field_validator("responsible_parties", mode="before")
    @classmethod
    def _split_parties(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [p.strip() for p in value if p and p.strip()]


class SettingsForm(FormModel):
    theme: Optional[Theme] = None
    notifications: Optional[bool] = None
    language: Optional[Language] = None
    compact_mode: Optional[bool] = None


class NotificationSettingsForm(FormModel):
    sound_enabled: Optional[bool] = None
    browser_notifications: Optional[bool] = None
    auto_delete: Optional[bool] = None


class EraseForm(FormModel):
    code: str = Field(min_length=1)


# =========
# 查询参数
# =========
class ReserveQuery(QueryForm):
    status: Optional[ReserveStatus] = None
    priority: Optional[Priority] = None
    project_id: Optional[str] = None
    category_id: Optional[str] = None
    contractor_id: Optional[str] = None
    search: Optional[str] = None


class ReserveExportQuery(QueryForm):
    project_id: Optional[str] = None
    category_id: Optional[str] = None
    contractor_id: Optional[str] = None


class TaskQuery(QueryForm):
    priority: Optional[Priority] = None
    project_id: Optional[str] = None
    status: Optional[TaskStatus] = None


class TaskStatusForm(FormModel):
    status: TaskStatus


class TaskProgressForm(FormModel):
    progress: int = Field(ge=0, le=100)


class SelectionChangeForm(FormModel):
    """Reception form cascade: current selection plus the dimension that changed."""

    project_id: Optional[str] = None
    block_ids: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    contractor_id: Optional[str] = None
    changed: Optional[Literal["project", "category", "contractor"]] = None
    value: Optional[str] = None
