"""
Application Services Package

Architectural Intent:
- Stateful coordination helpers used by the provisioning use cases
"""

from ccfleet.application.services.registration_transaction import RegistrationTransaction

__all__ = ["RegistrationTransaction"]
