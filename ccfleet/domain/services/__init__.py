"""
Domain Services Package

Architectural Intent:
- Pure provisioning logic: identity, configuration validation and target
  registration policy
- No I/O; every function here is safe to call during a dry-run plan
"""

from ccfleet.domain.services.identity_generator import IdentityGenerator, merge_tags
from ccfleet.domain.services.config_validator import ConfigValidator, COMPATIBILITY_TABLE
from ccfleet.domain.services.target_registration_engine import (
    REGISTRATION_POLICY,
    compute_delta,
    compute_registrations,
    shared_addresses,
    unused_slot_mismatches,
)

__all__ = [
    "IdentityGenerator",
    "merge_tags",
    "ConfigValidator",
    "COMPATIBILITY_TABLE",
    "REGISTRATION_POLICY",
    "compute_delta",
    "compute_registrations",
    "shared_addresses",
    "unused_slot_mismatches",
]
