from dataclasses import dataclass

# GENEVE encapsulation port used by gateway load balancer target groups.
GENEVE_PORT = 6081


@dataclass(frozen=True)
class TargetRegistration:
    """
    Value Object representing one address registered in a target group.
    """
    target_group_id: str
    address: str
    slot_index: int

    def __str__(self) -> str:
        return f"{self.address} (slot {self.slot_index}) -> {self.target_group_id}"


@dataclass(frozen=True)
class RegistrationDelta:
    to_add: tuple[TargetRegistration, ...] = ()
    to_remove: tuple[TargetRegistration, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove

    def __str__(self) -> str:
        return f"+{len(self.to_add)}/-{len(self.to_remove)} registrations"
