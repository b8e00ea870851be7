"""
Size Class Value Object

Architectural Intent:
- Discrete connector capacity tier
- Determines how many service interfaces a connector exposes, and therefore
  which address slots take part in target registration
"""

from __future__ import annotations
from enum import Enum

from ccfleet.domain.errors import ValidationError


class SizeClass(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def interface_count(self) -> int:
        return _INTERFACE_COUNTS[self]

    @property
    def consumed_slots(self) -> tuple[int, ...]:
        """1-based address slot indexes that participate in registration."""
        return tuple(range(1, self.interface_count + 1))

    @staticmethod
    def parse(value: "str | SizeClass") -> "SizeClass":
        if isinstance(value, SizeClass):
            return value
        try:
            return SizeClass(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in SizeClass)
            raise ValidationError(
                f"Unknown size class {value!r}; expected one of: {allowed}"
            ) from None

    def __str__(self) -> str:
        return self.value


_INTERFACE_COUNTS = {
    SizeClass.SMALL: 1,
    SizeClass.MEDIUM: 2,
    SizeClass.LARGE: 3,
}
