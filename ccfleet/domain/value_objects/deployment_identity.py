"""
Deployment Identity Value Object

Architectural Intent:
- Immutable identity shared by every resource group of one deployment
- Names and tags are pure functions of (name_prefix, suffix)
- Suffix and prefix are validated so they remain legal inside every
  downstream resource name
"""

import re
from dataclasses import dataclass, field
from typing import Mapping

from ccfleet.domain.errors import ValidationError

SUFFIX_LENGTH = 8
SUFFIX_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
MAX_PREFIX_LENGTH = 24

_SUFFIX_RE = re.compile(rf"^[a-z0-9]{{{SUFFIX_LENGTH}}}$")
_PREFIX_RE = re.compile(r"^[a-z][a-z0-9-]*$")


def validate_name_prefix(name_prefix: str) -> None:
    if not name_prefix or len(name_prefix) > MAX_PREFIX_LENGTH:
        raise ValidationError(
            f"name_prefix must be 1-{MAX_PREFIX_LENGTH} characters, got {name_prefix!r}"
        )
    if not _PREFIX_RE.match(name_prefix):
        raise ValidationError(
            f"name_prefix must start with a lowercase letter and contain only "
            f"[a-z0-9-], got {name_prefix!r}"
        )


@dataclass(frozen=True)
class DeploymentIdentity:
    name_prefix: str
    suffix: str
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_name_prefix(self.name_prefix)
        if not _SUFFIX_RE.match(self.suffix):
            raise ValidationError(
                f"suffix must be {SUFFIX_LENGTH} characters of [a-z0-9], got {self.suffix!r}"
            )
        # Freeze a private copy so callers cannot mutate shared tags.
        object.__setattr__(self, "tags", dict(self.tags))

    @property
    def deployment_name(self) -> str:
        return f"{self.name_prefix}-{self.suffix}"

    def resource_name(self, kind: str) -> str:
        return f"{self.name_prefix}-{kind}-{self.suffix}"

    def tags_for(self, kind: str) -> dict[str, str]:
        tags = dict(self.tags)
        tags["Name"] = self.resource_name(kind)
        return tags

    def __hash__(self) -> int:
        return hash((self.name_prefix, self.suffix))

    def __str__(self) -> str:
        return self.deployment_name
