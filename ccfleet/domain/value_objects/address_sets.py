"""
Address Sets Value Object

Architectural Intent:
- One ordered address list per connector service-interface slot (1..3)
- Addresses are validated at construction so a malformed entry is reported
  with the slot it came from, before anything is registered
"""

import ipaddress
from dataclasses import dataclass
from typing import Iterable, Sequence

from ccfleet.domain.errors import ValidationError

SLOT_COUNT = 3


def _normalize_slot(index: int, addresses: Iterable[str]) -> tuple[str, ...]:
    normalized: list[str] = []
    seen: set[str] = set()
    for raw in addresses:
        text = str(raw).strip()
        try:
            address = str(ipaddress.ip_address(text))
        except ValueError:
            raise ValidationError(f"slot {index}: invalid address {raw!r}") from None
        if address in seen:
            raise ValidationError(f"slot {index}: duplicate address {address}")
        seen.add(address)
        normalized.append(address)
    return tuple(normalized)


@dataclass(frozen=True)
class AddressSets:
    slots: tuple[tuple[str, ...], ...] = ((), (), ())

    def __post_init__(self) -> None:
        if len(self.slots) != SLOT_COUNT:
            raise ValidationError(
                f"expected {SLOT_COUNT} address slots, got {len(self.slots)}"
            )
        object.__setattr__(
            self,
            "slots",
            tuple(_normalize_slot(i, s) for i, s in enumerate(self.slots, start=1)),
        )

    @staticmethod
    def of(
        slot1: Sequence[str] = (),
        slot2: Sequence[str] = (),
        slot3: Sequence[str] = (),
    ) -> "AddressSets":
        return AddressSets(slots=(tuple(slot1), tuple(slot2), tuple(slot3)))

    def slot(self, index: int) -> tuple[str, ...]:
        if not 1 <= index <= SLOT_COUNT:
            raise ValidationError(f"slot index must be 1-{SLOT_COUNT}, got {index}")
        return self.slots[index - 1]

    @property
    def populated_slots(self) -> tuple[int, ...]:
        return tuple(i for i, s in enumerate(self.slots, start=1) if s)
