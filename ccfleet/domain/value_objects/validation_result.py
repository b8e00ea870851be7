from dataclasses import dataclass

from ccfleet.domain.errors import ValidationError


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a configuration check. Truthy only when the check passed, so
    the plan executor can use it directly as a gate.
    """
    ok: bool
    message: str = ""

    @staticmethod
    def success(message: str = "configuration is valid") -> "ValidationResult":
        return ValidationResult(ok=True, message=message)

    @staticmethod
    def failure(message: str) -> "ValidationResult":
        return ValidationResult(ok=False, message=message)

    def raise_if_failed(self) -> None:
        if not self.ok:
            raise ValidationError(self.message)

    def __bool__(self) -> bool:
        return self.ok

    def __str__(self) -> str:
        return self.message
