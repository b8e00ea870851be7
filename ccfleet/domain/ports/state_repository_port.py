"""
Deployment State Repository Port

Architectural Intent:
- Port for the externally-owned record of what was last applied
- Holds the persisted identity suffix per deployment and the registration
  set last written to its target group
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ccfleet.domain.value_objects.target_registration import TargetRegistration


class DeploymentStateRepository(ABC):
    @abstractmethod
    def load_suffix(self, name_prefix: str) -> Optional[str]:
        """Return the persisted identity suffix, or None for a new deployment."""
        pass

    @abstractmethod
    def save_suffix(self, name_prefix: str, suffix: str) -> None:
        pass

    @abstractmethod
    def load_registrations(self, name_prefix: str) -> list[TargetRegistration]:
        """Return the last applied registrations in their applied order."""
        pass

    @abstractmethod
    def save_registrations(
        self, name_prefix: str, registrations: Sequence[TargetRegistration]
    ) -> None:
        """Replace the applied registration set for a deployment."""
        pass

    @abstractmethod
    def forget(self, name_prefix: str) -> None:
        """Drop every record for a deployment after teardown."""
        pass
