"""
Config Validator Service

Architectural Intent:
- Pure predicate over (size class, compute profile)
- Its result gates the fleet-creation branch of the plan; failure is
  reported as a single actionable diagnostic instead of a partial fleet
"""

from typing import Mapping, Optional

from ccfleet.domain.errors import ValidationError
from ccfleet.domain.value_objects.size_class import SizeClass
from ccfleet.domain.value_objects.validation_result import ValidationResult

_LARGE_PROFILES = frozenset({"m5n.4xlarge", "m5.4xlarge", "c5.4xlarge"})
_MEDIUM_PROFILES = _LARGE_PROFILES | {"m5n.2xlarge", "m5.2xlarge", "c5.2xlarge"}
_SMALL_PROFILES = _MEDIUM_PROFILES | {
    "t3.medium",
    "t3a.medium",
    "m5n.large",
    "c5a.large",
    "m5.large",
    "c5.large",
}

COMPATIBILITY_TABLE: Mapping[SizeClass, frozenset[str]] = {
    SizeClass.SMALL: frozenset(_SMALL_PROFILES),
    SizeClass.MEDIUM: frozenset(_MEDIUM_PROFILES),
    SizeClass.LARGE: _LARGE_PROFILES,
}


class ConfigValidator:
    def __init__(self, table: Optional[Mapping[SizeClass, frozenset[str]]] = None) -> None:
        self.table = table if table is not None else COMPATIBILITY_TABLE

    def allowed_profiles(self, size_class: SizeClass) -> frozenset[str]:
        return self.table.get(size_class, frozenset())

    def validate(self, size_class: "SizeClass | str", compute_profile: str) -> ValidationResult:
        try:
            size = SizeClass.parse(size_class)
        except ValidationError as e:
            return ValidationResult.failure(str(e))

        allowed = self.allowed_profiles(size)
        if compute_profile in allowed:
            return ValidationResult.success(
                f"compute profile {compute_profile} supports size class {size}"
            )
        return ValidationResult.failure(
            f"compute profile {compute_profile!r} is not supported for size class "
            f"'{size}'; choose one of: {', '.join(sorted(allowed))}"
        )
