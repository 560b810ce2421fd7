"""
Configuration management for the Minecraft server fleet
Builds an immutable StackConfig from environment variables and an optional .env file
"""
import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError, ServerDefinitionError

logger = logging.getLogger(__name__)

JAVA_EDITION = "java"
BEDROCK_EDITION = "bedrock"
EDITIONS = (JAVA_EDITION, BEDROCK_EDITION)

DEFAULT_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


@dataclass(frozen=True)
class TwilioConfig:
    """SMS provider credentials handed to the watchdog; empty strings when unset."""

    phone_from: str = ""
    phone_to: str = ""
    account_id: str = ""
    auth_code: str = ""


@dataclass(frozen=True)
class MinecraftServerDef:
    """
    Per-server sizing and container environment.

    cpu and memory are kept exactly as supplied; a missing value is only
    rejected when the topology is planned, so the error can name the server.
    """

    cpu: Optional[int] = None
    memory: Optional[int] = None
    container_env: Dict[str, str] = field(default_factory=dict)
    edition: Optional[str] = None


@dataclass(frozen=True)
class StackConfig:
    domain_name: str = ""
    server_region: str = "us-east-1"
    minecraft_edition: str = JAVA_EDITION
    shutdown_minutes: str = "20"
    startup_minutes: str = "10"
    use_fargate_spot: bool = False
    task_cpu: int = 1024
    task_memory: int = 2048
    vpc_id: Optional[str] = None
    sns_email_address: Optional[str] = None
    twilio: TwilioConfig = field(default_factory=TwilioConfig)
    debug: bool = False
    minecraft_server_defs: Dict[str, MinecraftServerDef] = field(default_factory=dict)


def string_as_boolean(value: Optional[str]) -> bool:
    """Interpret an environment string as a flag."""
    if value is None:
        return False
    return value.strip().lower() in ("true", "1", "yes", "on")


def resolve_edition(value: Optional[str]) -> str:
    """Anything other than 'bedrock' means the Java edition."""
    if value and value.strip().lower() == BEDROCK_EDITION:
        return BEDROCK_EDITION
    return JAVA_EDITION


def _env_value(key: str, name: str, value: Any) -> str:
    # Container environment values are strings; JSON booleans use shell spelling.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ServerDefinitionError(
        key, f"containerEnv.{name}", "must be a string, number or boolean"
    )


def _parse_server_def(key: str, entry: Any) -> MinecraftServerDef:
    if not isinstance(entry, dict):
        raise ServerDefinitionError(key, None, "definition must be a JSON object")

    container_env = entry.get("containerEnv") or {}
    if not isinstance(container_env, dict):
        raise ServerDefinitionError(key, "containerEnv", "must be a JSON object")

    return MinecraftServerDef(
        cpu=entry.get("cpu"),
        memory=entry.get("memory"),
        container_env={
            str(name): _env_value(key, str(name), value) for name, value in container_env.items()
        },
        edition=entry.get("edition"),
    )


def resolve_minecraft_server_defs(raw_json: Optional[str] = "") -> Dict[str, MinecraftServerDef]:
    """
    Parse MINECRAFT_SERVER_DEFS_JSON.

    Malformed JSON is not fatal: the error is logged and an empty map is
    returned, which yields a fleet with no servers.
    """
    try:
        parsed = json.loads(raw_json or "")
    except (TypeError, ValueError) as e:
        logger.error(
            "Unable to resolve .env value for MINECRAFT_SERVER_DEFS_JSON: %s", e
        )
        return {}

    if not isinstance(parsed, dict):
        logger.error(
            "MINECRAFT_SERVER_DEFS_JSON must be a JSON object keyed by server name, got %s",
            type(parsed).__name__,
        )
        return {}

    return {str(key): _parse_server_def(str(key), entry) for key, entry in parsed.items()}


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from None


def resolve_config(environ: Optional[Mapping[str, str]] = None) -> StackConfig:
    """Build the stack configuration from an environment mapping (os.environ by default)."""
    env = os.environ if environ is None else environ

    return StackConfig(
        domain_name=env.get("DOMAIN_NAME", ""),
        server_region=env.get("SERVER_REGION") or "us-east-1",
        minecraft_edition=resolve_edition(env.get("MINECRAFT_EDITION")),
        shutdown_minutes=env.get("SHUTDOWN_MINUTES") or "20",
        startup_minutes=env.get("STARTUP_MINUTES") or "10",
        use_fargate_spot=string_as_boolean(env.get("USE_FARGATE_SPOT")),
        task_cpu=_int_setting(env, "TASK_CPU", 1024),
        task_memory=_int_setting(env, "TASK_MEMORY", 2048),
        vpc_id=_optional(env.get("VPC_ID")),
        sns_email_address=_optional(env.get("SNS_EMAIL_ADDRESS")),
        twilio=TwilioConfig(
            phone_from=env.get("TWILIO_PHONE_FROM", ""),
            phone_to=env.get("TWILIO_PHONE_TO", ""),
            account_id=env.get("TWILIO_ACCOUNT_ID", ""),
            auth_code=env.get("TWILIO_AUTH_CODE", ""),
        ),
        debug=string_as_boolean(env.get("DEBUG")),
        minecraft_server_defs=resolve_minecraft_server_defs(
            env.get("MINECRAFT_SERVER_DEFS_JSON")
        ),
    )


def load_environment_file(env_file: Union[str, Path, None] = None) -> bool:
    """Load a .env file into os.environ without overriding variables already set."""
    path = Path(env_file) if env_file else DEFAULT_ENV_FILE
    loaded = load_dotenv(dotenv_path=path, override=False)
    if loaded:
        logger.debug("Loaded environment from %s", path)
    return loaded


@lru_cache(maxsize=1)
def get_config() -> StackConfig:
    """Process-wide configuration, built once."""
    load_environment_file()
    return resolve_config()
