# chantier/schemas/base.py
from datetime import datetime, timezone
from typing import Annotated, Any, Callable, Dict
from zoneinfo import ZoneInfo

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _ensure_aware(value: datetime) -> datetime:
    # 旧数据里的无时区时间统一按 UTC 处理
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[datetime, AfterValidator(_ensure_aware)]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def site_clock(tz_name: str = "") -> Callable[[], datetime]:
    """
    Clock in the site's timezone; its date is the "today" of receptions and plannings.
    :param tz_name: IANA name such as "Europe/Paris"; empty means the system local timezone
    """
    if not tz_name:
        return lambda: datetime.now().astimezone()
    zone = ZoneInfo(tz_name)
    return lambda: datetime.now(zone)


class EntityModel(BaseModel):
    """Stored record: immutable, persisted as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def replace(self, **changes):
        """Functional update: returns a re-validated copy with ``changes`` applied."""
        return type(self).model_validate({**self.model_dump(), **changes})


class FormModel(BaseModel):
    """Form input: accepts camelCase or snake_case keys, strips strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )
