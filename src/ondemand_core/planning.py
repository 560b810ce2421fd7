"""
Topology planning for the server fleet

The tenant loop is a fold over the server definitions: each key yields an
immutable ServerPlan, and the only state carried between keys is the set of
editions whose ingress rule has already been opened. The CDK stack consumes
the finished plan, so every definition is validated before any construct
exists.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .config import EDITIONS, MinecraftServerDef, StackConfig
from .editions import MinecraftEditionConfig, get_minecraft_server_config
from .errors import ServerDefinitionError
from .naming import (
    CLUSTER_NAME,
    MC_SERVER_CONTAINER_NAME,
    SERVICE_NAME,
    WATCHDOG_SERVER_CONTAINER_NAME,
    is_valid_server_key,
    launcher_role_parameter,
    resource_name,
    server_hostname,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationChannel:
    """Operator notification topic; ``topic_arn`` is None when notifications are off."""

    topic_arn: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.topic_arn is not None

    def environment_value(self) -> str:
        # The watchdog reads an empty SNSTOPIC as "do not publish".
        return self.topic_arn if self.topic_arn is not None else ""


NOTIFICATIONS_DISABLED = NotificationChannel()


@dataclass(frozen=True)
class ServerPlan:
    """Names and sizing of one server's isolated subgraph."""

    key: str
    cpu: int
    memory: int
    edition: str
    edition_config: MinecraftEditionConfig
    container_env: Dict[str, str] = field(default_factory=dict)

    @property
    def service_name(self) -> str:
        return resource_name(SERVICE_NAME, self.key)

    @property
    def server_container_name(self) -> str:
        return resource_name(MC_SERVER_CONTAINER_NAME, self.key)

    @property
    def watchdog_container_name(self) -> str:
        return resource_name(WATCHDOG_SERVER_CONTAINER_NAME, self.key)

    @property
    def launcher_role_parameter(self) -> str:
        return launcher_role_parameter(self.key)

    def hostname(self, domain_name: str) -> str:
        return server_hostname(self.key, domain_name)


@dataclass(frozen=True)
class TopologyPlan:
    servers: Tuple[ServerPlan, ...] = ()
    ingress_editions: Tuple[str, ...] = ()

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(server.key for server in self.servers)

    def server(self, key: str) -> ServerPlan:
        for server in self.servers:
            if server.key == key:
                return server
        raise KeyError(key)


def _require_positive_int(key: str, field_name: str, value) -> int:
    if value is None:
        raise ServerDefinitionError(key, field_name, "is required")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ServerDefinitionError(key, field_name, f"must be a positive integer, got {value!r}")
    return value


def plan_server(key: str, server_def: MinecraftServerDef, default_edition: str) -> ServerPlan:
    """Validate one server definition and derive its plan."""
    if not is_valid_server_key(key):
        raise ServerDefinitionError(
            key, None, "server key must be a lowercase DNS label (a-z, 0-9, '-')"
        )

    cpu = _require_positive_int(key, "cpu", server_def.cpu)
    memory = _require_positive_int(key, "memory", server_def.memory)

    edition = server_def.edition or default_edition
    if edition not in EDITIONS:
        raise ServerDefinitionError(key, "edition", f"must be one of {', '.join(EDITIONS)}")

    return ServerPlan(
        key=key,
        cpu=cpu,
        memory=memory,
        edition=edition,
        edition_config=get_minecraft_server_config(edition),
        container_env=dict(server_def.container_env),
    )


def fold_server(
    plan: TopologyPlan, key: str, server_def: MinecraftServerDef, default_edition: str
) -> TopologyPlan:
    """Add one server to a plan, opening its edition's ingress rule only once."""
    server = plan_server(key, server_def, default_edition)
    ingress_editions = plan.ingress_editions
    if server.edition not in ingress_editions:
        ingress_editions = ingress_editions + (server.edition,)
    return TopologyPlan(servers=plan.servers + (server,), ingress_editions=ingress_editions)


def plan_topology(config: StackConfig) -> TopologyPlan:
    """Plan every server in the config; raises ServerDefinitionError on the first bad entry."""
    plan = TopologyPlan()
    for key, server_def in config.minecraft_server_defs.items():
        plan = fold_server(plan, key, server_def, config.minecraft_edition)

    logger.info(
        "Planned %d Minecraft server(s) %s with ingress for %s",
        len(plan.servers),
        list(plan.keys),
        list(plan.ingress_editions) or "no editions",
    )
    return plan


def build_watchdog_environment(
    server: ServerPlan,
    config: StackConfig,
    hosted_zone_id: str,
    notifications: NotificationChannel = NOTIFICATIONS_DISABLED,
) -> Dict[str, str]:
    """Environment handed to the idle watchdog sidecar of one server."""
    return {
        "CLUSTER": CLUSTER_NAME,
        "SERVICE": server.service_name,
        "DNSZONE": hosted_zone_id,
        "SERVERNAME": server.hostname(config.domain_name),
        "SNSTOPIC": notifications.environment_value(),
        "TWILIOFROM": config.twilio.phone_from,
        "TWILIOTO": config.twilio.phone_to,
        "TWILIOAID": config.twilio.account_id,
        "TWILIOAUTH": config.twilio.auth_code,
        "STARTUPMIN": config.startup_minutes,
        "SHUTDOWNMIN": config.shutdown_minutes,
    }
