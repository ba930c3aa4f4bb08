"""
models/result.py
----------------
Uniform return type for service operations invoked by handlers.
"""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ActionResult(Generic[T]):
    """
    Outcome of a service call.

    Attributes:
        success: Whether the operation completed.
        data: The resulting object on success.
        error: Short user-facing reason on failure.
        validation_errors: Field path -> messages when input was rejected.
    """
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    validation_errors: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, validation_errors: Optional[dict] = None) -> "ActionResult[T]":
        return cls(success=False, error=error, validation_errors=validation_errors or {})
