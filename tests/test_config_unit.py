"""
Unit tests for config module
Tests environment parsing and the tenant map fallback
"""
import json
import logging
import os
from unittest.mock import patch

import pytest

from ondemand_core import config as config_module
from ondemand_core.config import (
    MinecraftServerDef,
    resolve_config,
    resolve_edition,
    resolve_minecraft_server_defs,
    string_as_boolean,
)
from ondemand_core.errors import ConfigurationError, ServerDefinitionError


@pytest.mark.unit
class TestResolveConfig:
    """Test configuration management"""

    def test_defaults(self):
        config = resolve_config({})

        assert config.domain_name == ""
        assert config.server_region == "us-east-1"
        assert config.minecraft_edition == "java"
        assert config.shutdown_minutes == "20"
        assert config.startup_minutes == "10"
        assert config.use_fargate_spot is False
        assert config.task_cpu == 1024
        assert config.task_memory == 2048
        assert config.vpc_id is None
        assert config.sns_email_address is None
        assert config.twilio.phone_from == ""
        assert config.debug is False
        assert config.minecraft_server_defs == {}

    def test_reads_all_variables(self):
        environ = {
            "DOMAIN_NAME": "mc.example.com",
            "SERVER_REGION": "eu-west-1",
            "MINECRAFT_EDITION": "bedrock",
            "SHUTDOWN_MINUTES": "30",
            "STARTUP_MINUTES": "5",
            "USE_FARGATE_SPOT": "true",
            "TASK_CPU": "2048",
            "TASK_MEMORY": "4096",
            "VPC_ID": "vpc-0abc",
            "SNS_EMAIL_ADDRESS": "ops@example.com",
            "TWILIO_PHONE_FROM": "+15550000001",
            "TWILIO_PHONE_TO": "+15550000002",
            "TWILIO_ACCOUNT_ID": "AC123",
            "TWILIO_AUTH_CODE": "secret",
            "DEBUG": "1",
            "MINECRAFT_SERVER_DEFS_JSON": json.dumps(
                {"survival": {"cpu": 1024, "memory": 2048, "containerEnv": {"EULA": "TRUE"}}}
            ),
        }

        config = resolve_config(environ)

        assert config.domain_name == "mc.example.com"
        assert config.server_region == "eu-west-1"
        assert config.minecraft_edition == "bedrock"
        assert config.shutdown_minutes == "30"
        assert config.startup_minutes == "5"
        assert config.use_fargate_spot is True
        assert config.task_cpu == 2048
        assert config.task_memory == 4096
        assert config.vpc_id == "vpc-0abc"
        assert config.sns_email_address == "ops@example.com"
        assert config.twilio.account_id == "AC123"
        assert config.twilio.auth_code == "secret"
        assert config.debug is True
        assert config.minecraft_server_defs == {
            "survival": MinecraftServerDef(cpu=1024, memory=2048, container_env={"EULA": "TRUE"})
        }

    @pytest.mark.parametrize("name", ["TASK_CPU", "TASK_MEMORY"])
    def test_non_numeric_task_size_is_a_configuration_error(self, name):
        with pytest.raises(ConfigurationError, match=name):
            resolve_config({name: "lots"})

    def test_blank_optional_values_are_absent(self):
        config = resolve_config({"VPC_ID": "  ", "SNS_EMAIL_ADDRESS": ""})

        assert config.vpc_id is None
        assert config.sns_email_address is None

    def test_config_is_immutable(self):
        config = resolve_config({})

        with pytest.raises(AttributeError):
            config.domain_name = "other.example.com"

    @patch.dict(os.environ, {"DOMAIN_NAME": "env.example.com"}, clear=True)
    def test_reads_process_environment_by_default(self):
        assert resolve_config().domain_name == "env.example.com"


@pytest.mark.unit
class TestServerDefinitions:

    def test_malformed_json_falls_back_to_empty_map(self, caplog):
        with caplog.at_level(logging.ERROR, logger="ondemand_core.config"):
            result = resolve_minecraft_server_defs("{not json")

        assert result == {}
        assert "MINECRAFT_SERVER_DEFS_JSON" in caplog.text

    def test_malformed_json_in_environment_gives_no_servers(self, caplog):
        with caplog.at_level(logging.ERROR):
            config = resolve_config({"MINECRAFT_SERVER_DEFS_JSON": "{not json"})

        assert config.minecraft_server_defs == {}
        assert caplog.records

    def test_non_object_json_falls_back_to_empty_map(self, caplog):
        with caplog.at_level(logging.ERROR):
            assert resolve_minecraft_server_defs("[1, 2]") == {}
        assert "JSON object" in caplog.text

    def test_missing_cpu_is_kept_for_planning(self):
        result = resolve_minecraft_server_defs('{"s1": {"memory": 1024}}')

        assert result["s1"].cpu is None
        assert result["s1"].memory == 1024
        assert result["s1"].container_env == {}

    def test_container_env_values_become_strings(self):
        result = resolve_minecraft_server_defs(
            '{"s1": {"cpu": 512, "memory": 1024, "containerEnv": {"MAX_PLAYERS": 10}}}'
        )

        assert result["s1"].container_env == {"MAX_PLAYERS": "10"}

    def test_container_env_booleans_use_lowercase(self):
        result = resolve_minecraft_server_defs(
            '{"s1": {"cpu": 512, "memory": 1024, "containerEnv": {"ONLINE_MODE": true, "PVP": false}}}'
        )

        assert result["s1"].container_env == {"ONLINE_MODE": "true", "PVP": "false"}

    @pytest.mark.parametrize("value", ["null", "[1, 2]", '{"nested": 1}'])
    def test_container_env_rejects_non_scalar_values(self, value):
        with pytest.raises(ServerDefinitionError) as excinfo:
            resolve_minecraft_server_defs(
                '{"s1": {"cpu": 512, "memory": 1024, "containerEnv": {"MOTD": %s}}}' % value
            )

        assert excinfo.value.server_key == "s1"
        assert excinfo.value.field == "containerEnv.MOTD"

    def test_edition_override_is_read(self):
        result = resolve_minecraft_server_defs(
            '{"pe": {"cpu": 512, "memory": 1024, "edition": "bedrock"}}'
        )

        assert result["pe"].edition == "bedrock"

    def test_entry_that_is_not_an_object_is_rejected(self):
        with pytest.raises(ServerDefinitionError) as excinfo:
            resolve_minecraft_server_defs('{"s1": 512}')

        assert excinfo.value.server_key == "s1"


@pytest.mark.unit
class TestHelpers:

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", "on", " True "])
    def test_truthy_strings(self, value):
        assert string_as_boolean(value) is True

    @pytest.mark.parametrize("value", [None, "", "false", "0", "no", "off", "maybe"])
    def test_falsy_strings(self, value):
        assert string_as_boolean(value) is False

    @pytest.mark.parametrize(
        "value,expected",
        [("bedrock", "bedrock"), ("Bedrock", "bedrock"), ("java", "java"), ("", "java"), (None, "java"), ("pocket", "java")],
    )
    def test_resolve_edition(self, value, expected):
        assert resolve_edition(value) == expected

    def test_load_environment_file_does_not_override(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DOMAIN_NAME=file.example.com\nSTARTUP_MINUTES=3\n")

        with patch.dict(os.environ, {"DOMAIN_NAME": "shell.example.com"}, clear=True):
            assert config_module.load_environment_file(env_file) is True
            assert os.environ["DOMAIN_NAME"] == "shell.example.com"
            assert os.environ["STARTUP_MINUTES"] == "3"

    def test_config_singleton(self):
        config_module.get_config.cache_clear()
        try:
            with patch.object(config_module, "load_environment_file", return_value=False):
                config1 = config_module.get_config()
                config2 = config_module.get_config()
        finally:
            config_module.get_config.cache_clear()

        assert config1 is config2
