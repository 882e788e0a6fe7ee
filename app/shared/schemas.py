from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


def to_camel(value: str) -> str:
    """Convert snake_case field names to lowerCamelCase for API payloads."""
    if "_" not in value:
        return value
    head, *tail = value.split("_")
    return head + "".join(word.capitalize() for word in tail if word)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ListEnvelope(CamelModel, Generic[T]):
    """`{success, count, data}` wrapper the dashboard expects on list endpoints."""

    success: bool = True
    count: int
    data: list[T]

    @classmethod
    def of(cls, items: list[T]) -> "ListEnvelope[T]":
        return cls(count=len(items), data=items)


class ItemEnvelope(CamelModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T
