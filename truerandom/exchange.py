"""Single-slot value holder handed to draw hooks."""
from __future__ import annotations
from typing import Any, Generic, NamedTuple, TypeVar

T = TypeVar("T")


class ExchangeCell(Generic[T]):
    """Mutable box; a hook may ``set`` a replacement before the value is used."""

    __slots__ = ("_value",)

    def __init__(self, value: T):
        self._value = value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value

    def __repr__(self):
        return f"ExchangeCell({self._value!r})"


class HookResult(NamedTuple):
    """Tagged hook return, the alternative to mutating the cell.

    ``HookResult(True, x)`` replaces the in-flight value (or draw function)
    with ``x``; ``HookResult(False, ...)`` leaves it alone.
    """
    use_override: bool
    value: Any = None
