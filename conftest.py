"""Global test configuration.

Shared fixtures: a fresh simulated AWS control plane, an in-memory state
repository and a request builder with sensible connector defaults.
"""

import pytest

from ccfleet.application.dtos.deployment_dtos import ProvisionRequest
from ccfleet.domain.value_objects.address_sets import AddressSets
from ccfleet.domain.value_objects.settings import SupportSettings
from ccfleet.infrastructure.adapters.aws_adapter import AWSAdapter
from ccfleet.infrastructure.repositories.sqlite_state_repository import SQLiteStateRepository


@pytest.fixture
def aws():
    return AWSAdapter()


@pytest.fixture
def state():
    repo = SQLiteStateRepository(":memory:")
    repo.connect()
    yield repo
    repo.close()


@pytest.fixture
def make_request():
    def _make(**overrides):
        values = dict(
            name_prefix="zscc",
            owner_tag="netops",
            size_class="large",
            compute_profile="m5n.4xlarge",
            address_sets=AddressSets.of(
                ["10.1.200.10", "10.1.200.11"], ["10.1.201.10"], ["10.1.202.10"]
            ),
            support=SupportSettings(bastion_enabled=True, workload_count=1),
        )
        values.update(overrides)
        return ProvisionRequest(**values)

    return _make
