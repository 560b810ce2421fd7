"""
Well-known names shared with the launcher and watchdog, and the per-server naming rule
"""
import re

CLUSTER_NAME = "minecraft"
SERVICE_NAME = "minecraft-server"
MC_SERVER_CONTAINER_NAME = "minecraft-server"
WATCHDOG_SERVER_CONTAINER_NAME = "minecraft-ecsfargate-watchdog"
ECS_VOLUME_NAME = "data"
CONTAINER_DATA_PATH = "/minecraft"

HOSTED_ZONE_SSM_PARAMETER = "MinecraftHostedZoneID"
LAUNCHER_LAMBDA_ARN_SSM_PARAMETER = "LauncherLambdaRoleArn"
DOMAIN_STACK_REGION = "us-east-1"

SEPARATOR = "-"

# A server key ends up as a DNS label and as a suffix of ECS/IAM names.
_SERVER_KEY_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def is_valid_server_key(key: str) -> bool:
    return isinstance(key, str) and bool(_SERVER_KEY_PATTERN.match(key))


def resource_name(base: str, key: str) -> str:
    """
    Name of a per-server resource: ``<base>-<key>``.

    For a fixed base this is injective over server keys, so unique keys
    always give unique names.
    """
    if not key:
        raise ValueError("server key must be a non-empty string")
    return f"{base}{SEPARATOR}{key}"


def construct_id(base: str, key: str) -> str:
    """CDK construct id for a per-server construct."""
    return resource_name(base, key)


def server_hostname(key: str, domain_name: str) -> str:
    return f"{key}.{domain_name}"


def launcher_role_parameter(key: str) -> str:
    """SSM parameter holding the launcher lambda role ARN for one server."""
    return resource_name(LAUNCHER_LAMBDA_ARN_SSM_PARAMETER, key)
