"""
Tri-state field updates for partial PATCH bodies.

A JSON body distinguishes "field absent" from "field explicitly null".
pydantic records which fields were sent in model_fields_set; FieldUpdate
turns each optional column into one of:

    UNCHANGED          field absent from the request
    SetTo(value)       field present with a value
    CLEARED            field present and null
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

_UNCHANGED = "unchanged"
_SET = "set"
_CLEARED = "cleared"


@dataclass(frozen=True)
class FieldUpdate(Generic[T]):
    kind: str
    value: Optional[T] = None

    @classmethod
    def set_to(cls, value: T) -> "FieldUpdate[T]":
        return cls(_SET, value)

    @property
    def is_unchanged(self) -> bool:
        return self.kind == _UNCHANGED

    @property
    def is_set(self) -> bool:
        return self.kind == _SET

    @property
    def is_cleared(self) -> bool:
        return self.kind == _CLEARED

    def apply(self, current: Optional[T]) -> Optional[T]:
        """Resolve against the stored value."""
        if self.kind == _UNCHANGED:
            return current
        if self.kind == _CLEARED:
            return None
        return self.value


UNCHANGED: FieldUpdate = FieldUpdate(_UNCHANGED)
CLEARED: FieldUpdate = FieldUpdate(_CLEARED)


def field_update(model: BaseModel, name: str) -> FieldUpdate:
    """Read one field of a request model as a FieldUpdate."""
    if name not in model.model_fields_set:
        return UNCHANGED
    value = getattr(model, name)
    if value is None:
        return CLEARED
    return FieldUpdate.set_to(value)


def apply_updates(target: Any, model: BaseModel, names) -> bool:
    """Apply every sent field of `model` onto `target`. Returns True if anything changed."""
    changed = False
    for name in names:
        update = field_update(model, name)
        if update.is_unchanged:
            continue
        new_value = update.apply(getattr(target, name))
        if new_value != getattr(target, name):
            setattr(target, name, new_value)
            changed = True
    return changed
