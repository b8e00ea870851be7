"""Tests for configuration module."""

import json
import os

import pytest
from unittest.mock import patch

from ccfleet.application.dtos.deployment_dtos import ProvisionRequest
from ccfleet.domain.errors import ValidationError
from ccfleet.domain.value_objects.size_class import SizeClass
from ccfleet.infrastructure.config import (
    AddressesConfig,
    CCFleetConfig,
    ConnectorConfig,
    LoadBalancerConfig,
    load_config,
)


class TestDefaultConfig:
    def test_defaults(self):
        config = load_config(path="/nonexistent/ccfleet.json")
        assert config.log_level == "WARNING"
        assert config.identity.name_prefix == "zscc"
        assert config.connector.size_class == "small"
        assert config.load_balancer.health_check_path == "/?cchealth"
        assert config.addresses.slot1 == ()
        assert config.state.db_path == "ccfleet.db"

    def test_all_sections_present(self):
        config = load_config(path="/nonexistent/ccfleet.json")
        assert isinstance(config, CCFleetConfig)
        assert isinstance(config.connector, ConnectorConfig)
        assert isinstance(config.addresses, AddressesConfig)
        assert isinstance(config.load_balancer, LoadBalancerConfig)


class TestFileConfig:
    def test_load_from_file(self, tmp_path):
        config_file = tmp_path / "ccfleet.json"
        config_file.write_text(json.dumps({
            "log_level": "DEBUG",
            "identity": {"name_prefix": "edge", "tags": {"Team": "net"}},
            "connector": {"size_class": "large", "instance_type": "c5.4xlarge"},
            "addresses": {"slot1": ["10.0.0.1", "10.0.0.2"]},
            "load_balancer": {"cross_zone_enabled": True},
        }))

        config = load_config(path=str(config_file))
        assert config.log_level == "DEBUG"
        assert config.identity.name_prefix == "edge"
        assert config.identity.tags == {"Team": "net"}
        assert config.connector.size_class == "large"
        assert config.addresses.slot1 == ("10.0.0.1", "10.0.0.2")
        assert config.load_balancer.cross_zone_enabled is True

    def test_partial_config(self, tmp_path):
        config_file = tmp_path / "ccfleet.json"
        config_file.write_text(json.dumps({"network": {"az_count": 3}}))

        config = load_config(path=str(config_file))
        assert config.network.az_count == 3
        assert config.network.vpc_cidr == "10.1.0.0/16"

    def test_invalid_json_falls_back(self, tmp_path):
        config_file = tmp_path / "ccfleet.json"
        config_file.write_text("{not json")

        config = load_config(path=str(config_file))
        assert config.identity.name_prefix == "zscc"

    def test_unknown_keys_ignored(self, tmp_path):
        config_file = tmp_path / "ccfleet.json"
        config_file.write_text(json.dumps({"connector": {"flavor": "x"}}))

        config = load_config(path=str(config_file))
        assert config.connector == ConnectorConfig()


class TestEnvOverride:
    def test_env_overrides_file(self, tmp_path):
        config_file = tmp_path / "ccfleet.json"
        config_file.write_text(json.dumps({"connector": {"size_class": "small"}}))

        env = {
            "CCFLEET_CONNECTOR_SIZE_CLASS": "medium",
            "CCFLEET_CONNECTOR_MIN_SIZE": "3",
            "CCFLEET_ADDRESSES_SLOT2": "10.0.1.5, 10.0.1.6",
            "CCFLEET_ADDRESSES_STRICT_SLOTS": "true",
            "CCFLEET_LOAD_BALANCER_HEALTH_CHECK_PORT": "8080",
            "CCFLEET_IDENTITY_TAGS": '{"Env": "prod"}',
            "CCFLEET_LOG_LEVEL": "INFO",
        }
        with patch.dict(os.environ, env):
            config = load_config(path=str(config_file))

        assert config.connector.size_class == "medium"
        assert config.connector.min_size == 3
        assert config.addresses.slot2 == ("10.0.1.5", "10.0.1.6")
        assert config.addresses.strict_slots is True
        assert config.load_balancer.health_check_port == 8080
        assert config.identity.tags == {"Env": "prod"}
        assert config.log_level == "INFO"


class TestRequestFromConfig:
    def test_builds_request(self):
        config = CCFleetConfig(
            connector=ConnectorConfig(size_class="Medium", instance_type="m5.2xlarge",
                                      secret_name="zs/provision"),
            addresses=AddressesConfig(slot1=("10.0.0.1",), slot2=("10.0.1.1",)),
        )

        request = ProvisionRequest.from_config(config)

        assert request.size_class is SizeClass.MEDIUM
        assert request.address_sets.populated_slots == (1, 2)
        assert b"SECRET_NAME=zs/provision" in request.bootstrap.data
        assert b"GWLB_ENABLED=true" in request.bootstrap.data

    def test_bootstrap_from_file(self, tmp_path):
        userdata = tmp_path / "userdata"
        userdata.write_bytes(b"opaque")
        config = CCFleetConfig(connector=ConnectorConfig(bootstrap_path=str(userdata)))

        assert ProvisionRequest.from_config(config).bootstrap.data == b"opaque"

    def test_out_of_range_setting_rejected(self):
        config = CCFleetConfig(load_balancer=LoadBalancerConfig(health_check_interval=1))
        with pytest.raises(ValidationError, match="interval"):
            ProvisionRequest.from_config(config)

    def test_bad_address_rejected(self):
        config = CCFleetConfig(addresses=AddressesConfig(slot3=("10.0.0.300",)))
        with pytest.raises(ValidationError, match="slot 3"):
            ProvisionRequest.from_config(config)
