"""
Identity Generator Service

Architectural Intent:
- Produces the one DeploymentIdentity threaded through every resource group
- Suffix is random, fixed-length and drawn from [a-z0-9] so it stays legal in
  every downstream naming scheme
- Reserved tags always win over caller-supplied tags

Design Decisions:
- Uses secrets.choice so suffixes are not predictable across deployments
- Tag merge is last-writer-wins across extra tag maps, then reserved keys are
  laid on top
"""

import logging
import secrets
from typing import Mapping, Optional

from ccfleet.domain.value_objects.deployment_identity import (
    DeploymentIdentity,
    SUFFIX_ALPHABET,
    SUFFIX_LENGTH,
    validate_name_prefix,
)

logger = logging.getLogger(__name__)

OWNER_TAG = "Owner"
MANAGED_BY_TAG = "ManagedBy"
VENDOR_TAG = "Vendor"


def cluster_tag_key(name_prefix: str, suffix: str, vendor: str) -> str:
    return f"{vendor.lower()}-cluster/{name_prefix}-cluster-{suffix}"


def merge_tags(
    reserved: Mapping[str, str], *extra: Optional[Mapping[str, str]]
) -> dict[str, str]:
    merged: dict[str, str] = {}
    for tags in extra:
        if tags:
            merged.update(tags)
    shadowed = sorted(k for k in merged if k in reserved and merged[k] != reserved[k])
    if shadowed:
        logger.debug("Reserved tag keys ignored in extra tags: %s", shadowed)
    merged.update(reserved)
    return merged


class IdentityGenerator:
    def __init__(self, vendor: str = "Zscaler", managed_by: str = "ccfleet") -> None:
        self.vendor = vendor
        self.managed_by = managed_by

    @staticmethod
    def new_suffix() -> str:
        return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))

    def reserved_tags(self, name_prefix: str, suffix: str, owner_tag: str) -> dict[str, str]:
        return {
            cluster_tag_key(name_prefix, suffix, self.vendor): "shared",
            OWNER_TAG: owner_tag,
            MANAGED_BY_TAG: self.managed_by,
            VENDOR_TAG: self.vendor,
        }

    def generate(
        self,
        name_prefix: str,
        owner_tag: str,
        extra_tags: Optional[Mapping[str, str]] = None,
    ) -> DeploymentIdentity:
        validate_name_prefix(name_prefix)
        return self.rebuild(name_prefix, self.new_suffix(), owner_tag, extra_tags)

    def rebuild(
        self,
        name_prefix: str,
        suffix: str,
        owner_tag: str,
        extra_tags: Optional[Mapping[str, str]] = None,
    ) -> DeploymentIdentity:
        """Recreate an identity from a persisted suffix without drawing a new one."""
        tags = merge_tags(self.reserved_tags(name_prefix, suffix, owner_tag), extra_tags)
        return DeploymentIdentity(name_prefix=name_prefix, suffix=suffix, tags=tags)
