"""
Provisioning Errors

Architectural Intent:
- Single error taxonomy shared by every layer of the provisioning core
- Configuration problems are ValidationErrors and stop the fleet branch only
- Missing upstream handles are DependencyUnavailableErrors and fail the plan
- Unused-slot mismatches are reported as warnings, not raised, unless strict
"""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base class for all ccfleet provisioning errors."""


class ValidationError(ProvisioningError, ValueError):
    """Invalid configuration or an incompatible size class / compute pairing."""


class DependencyUnavailableError(ProvisioningError):
    def __init__(self, component: str, dependency: str, detail: str = "") -> None:
        self.component = component
        self.dependency = dependency
        message = f"{component}: upstream '{dependency}' is unavailable"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RegistrationMismatchError(ProvisioningError):
    """An address slot is populated but not consumed by the size class."""

    def __init__(self, slot_index: int, address_count: int, size_class: str) -> None:
        self.slot_index = slot_index
        self.address_count = address_count
        self.size_class = size_class
        super().__init__(
            f"slot {slot_index} holds {address_count} address(es) but size class "
            f"'{size_class}' does not consume it; addresses ignored"
        )


class RegistrationApplyError(ProvisioningError):
    """A registration transaction failed and was rolled back."""
