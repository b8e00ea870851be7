"""
Target Registration Engine

Architectural Intent:
- Pure, deterministic mapping from (size class, address sets, target group)
  to the ordered list of load balancer target registrations
- One declarative policy table drives every size class; no per-slot branches
- Addresses in slots the size class does not consume never leak into the
  target group

Ordering:
- Slot 1 before slot 2 before slot 3, insertion order within a slot, so
  re-planning identical inputs yields an identical sequence that can be
  diffed against the last applied state
"""

from typing import Iterable, Mapping

from ccfleet.domain.errors import RegistrationMismatchError
from ccfleet.domain.value_objects.address_sets import AddressSets
from ccfleet.domain.value_objects.size_class import SizeClass
from ccfleet.domain.value_objects.target_registration import (
    RegistrationDelta,
    TargetRegistration,
)

REGISTRATION_POLICY: Mapping[SizeClass, tuple[int, ...]] = {
    size: size.consumed_slots for size in SizeClass
}


def compute_registrations(
    size_class: SizeClass,
    address_sets: AddressSets,
    target_group_id: str,
) -> tuple[TargetRegistration, ...]:
    return tuple(
        TargetRegistration(target_group_id, address, slot)
        for slot in REGISTRATION_POLICY[size_class]
        for address in address_sets.slot(slot)
    )


def unused_slot_mismatches(
    size_class: SizeClass, address_sets: AddressSets
) -> list[RegistrationMismatchError]:
    consumed = REGISTRATION_POLICY[size_class]
    return [
        RegistrationMismatchError(slot, len(address_sets.slot(slot)), str(size_class))
        for slot in address_sets.populated_slots
        if slot not in consumed
    ]


def compute_delta(
    applied: Iterable[TargetRegistration],
    desired: Iterable[TargetRegistration],
) -> RegistrationDelta:
    applied = tuple(applied)
    desired = tuple(desired)
    applied_set = set(applied)
    desired_set = set(desired)
    return RegistrationDelta(
        to_add=tuple(r for r in desired if r not in applied_set),
        to_remove=tuple(r for r in applied if r not in desired_set),
    )


def shared_addresses(size_class: SizeClass, address_sets: AddressSets) -> tuple[str, ...]:
    """Addresses listed in more than one slot the size class consumes.

    Load balancer membership is keyed by address and port, so a second slot
    holding the same address cannot be registered or removed on its own.
    """
    seen: set[str] = set()
    shared: list[str] = []
    for slot in REGISTRATION_POLICY[size_class]:
        for address in address_sets.slot(slot):
            if address in seen and address not in shared:
                shared.append(address)
            seen.add(address)
    return tuple(shared)
