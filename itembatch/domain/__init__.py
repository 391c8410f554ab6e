"""Domain layer definitions."""

from .outcomes import Failure, Outcome, Success

__all__ = [
    "Failure",
    "Outcome",
    "Success",
]
