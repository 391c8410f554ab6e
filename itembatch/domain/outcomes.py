"""Terminal results of a single item processing task."""
from __future__ import annotations

from dataclasses import dataclass

from itembatch.core.schema import Item


@dataclass(frozen=True, slots=True)
class Success:
    item: Item


@dataclass(frozen=True, slots=True)
class Failure:
    item_id: int
    cause: Exception


Outcome = Success | Failure
