from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ItemStatus(str, Enum):
    NEW = "NEW"
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"


class ItemPayload(BaseModel):
    """Request body accepted when creating or replacing an item."""

    name: str = Field(min_length=1)
    description: str = ""
    status: ItemStatus = ItemStatus.NEW
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise PydanticCustomError("email", "Invalid email format")
        return value


class Item(ItemPayload):
    """Stored item. Instances are frozen; use ``with_status`` to derive updates."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None

    def with_status(self, status: ItemStatus) -> "Item":
        return self.model_copy(update={"status": status})

    @classmethod
    def from_payload(cls, payload: ItemPayload, *, item_id: int | None = None) -> "Item":
        return cls(id=item_id, **payload.model_dump())
