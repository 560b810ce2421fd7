"""
One Minecraft server: task definition, server and watchdog containers,
Fargate service and the policies scoped to that service
"""
import logging
import shutil
from pathlib import Path

from aws_cdk import (
    aws_ecs as ecs,
    aws_iam as iam,
    aws_logs as logs,
)
from constructs import Construct

from ondemand_core.config import StackConfig
from ondemand_core.naming import (
    CONTAINER_DATA_PATH,
    ECS_VOLUME_NAME,
    MC_SERVER_CONTAINER_NAME,
    WATCHDOG_SERVER_CONTAINER_NAME,
    construct_id,
)
from ondemand_core.planning import NotificationChannel, ServerPlan, build_watchdog_environment
from ondemand_core.policies import FleetPolicyGenerator

from .compute_cluster import ComputeCluster
from .shared_storage import SharedStorage

logger = logging.getLogger(__name__)

WATCHDOG_ASSET_DIR = Path(__file__).resolve().parents[2] / "minecraft-ecsfargate-watchdog"
WATCHDOG_REGISTRY_IMAGE = "doctorray/minecraft-ecsfargate-watchdog"


def is_docker_installed() -> bool:
    return shutil.which("docker") is not None


def watchdog_image() -> ecs.ContainerImage:
    """Build the watchdog locally when possible, otherwise pull the published image."""
    if is_docker_installed() and WATCHDOG_ASSET_DIR.is_dir():
        return ecs.ContainerImage.from_asset(str(WATCHDOG_ASSET_DIR))
    return ecs.ContainerImage.from_registry(WATCHDOG_REGISTRY_IMAGE)


def _log_driver(debug: bool, stream_prefix: str):
    # Log shipping costs money; containers only log when debugging.
    if not debug:
        return None
    return ecs.LogDrivers.aws_logs(
        stream_prefix=stream_prefix,
        log_retention=logs.RetentionDays.THREE_DAYS,
    )


def _protocol(edition_protocol: str) -> ecs.Protocol:
    return ecs.Protocol.UDP if edition_protocol == "udp" else ecs.Protocol.TCP


class MinecraftServerService:
    """Everything owned by a single server key."""

    def __init__(
        self,
        scope: Construct,
        server: ServerPlan,
        config: StackConfig,
        cluster: ComputeCluster,
        storage: SharedStorage,
        notifications: NotificationChannel,
        hosted_zone_id: str,
        launcher_role_arn: str,
        policy_generator: FleetPolicyGenerator,
    ):
        key = server.key
        self.server = server

        self.task_role = iam.Role(
            scope,
            construct_id("TaskRole", key),
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com"),
            description=f"Minecraft ECS task role for {key}",
        )
        storage.grant_read_write(self.task_role)

        self.task_definition = ecs.FargateTaskDefinition(
            scope,
            construct_id("TaskDefinition", key),
            task_role=self.task_role,
            memory_limit_mib=server.memory,
            cpu=server.cpu,
            volumes=[
                ecs.Volume(
                    name=ECS_VOLUME_NAME,
                    efs_volume_configuration=ecs.EfsVolumeConfiguration(
                        file_system_id=storage.file_system.file_system_id,
                        transit_encryption="ENABLED",
                        authorization_config=ecs.AuthorizationConfig(
                            access_point_id=storage.access_point.access_point_id,
                            iam="ENABLED",
                        ),
                    ),
                )
            ],
        )

        edition = server.edition_config
        self.server_container = ecs.ContainerDefinition(
            scope,
            construct_id("ServerContainer", key),
            task_definition=self.task_definition,
            container_name=server.server_container_name,
            image=ecs.ContainerImage.from_registry(edition.image),
            port_mappings=[
                ecs.PortMapping(
                    container_port=edition.port,
                    host_port=edition.port,
                    protocol=_protocol(edition.protocol),
                )
            ],
            environment=dict(server.container_env),
            entry_point=[f"{CONTAINER_DATA_PATH}/minecraft.sh"],
            essential=True,
            # The watchdog drives the server through its console.
            pseudo_terminal=True,
            logging=_log_driver(config.debug, MC_SERVER_CONTAINER_NAME),
        )
        self.server_container.add_mount_points(self._data_mount())

        self.service = ecs.FargateService(
            scope,
            construct_id("FargateService", key),
            cluster=cluster.cluster,
            capacity_provider_strategies=[
                ecs.CapacityProviderStrategy(
                    capacity_provider="FARGATE_SPOT" if config.use_fargate_spot else "FARGATE",
                    weight=1,
                    base=1,
                )
            ],
            task_definition=self.task_definition,
            platform_version=ecs.FargatePlatformVersion.LATEST,
            service_name=server.service_name,
            # Started on demand by the launcher.
            desired_count=0,
            assign_public_ip=True,
            security_groups=[cluster.service_security_group],
        )
        storage.allow_default_port_from(self.service)

        self.watchdog_container = ecs.ContainerDefinition(
            scope,
            construct_id("WatchDogContainer", key),
            task_definition=self.task_definition,
            container_name=server.watchdog_container_name,
            image=watchdog_image(),
            entry_point=[f"{CONTAINER_DATA_PATH}/watchdog.sh"],
            essential=True,
            environment=build_watchdog_environment(server, config, hosted_zone_id, notifications),
            logging=_log_driver(config.debug, WATCHDOG_SERVER_CONTAINER_NAME),
        )
        self.watchdog_container.add_mount_points(self._data_mount())

        self.service_control_policy = iam.Policy(
            scope,
            construct_id("ServiceControlPolicy", key),
            statements=[
                iam.PolicyStatement.from_json(statement)
                for statement in policy_generator.generate_service_control_statements(
                    key, self.service.service_arn
                )
            ],
        )
        self.service_control_policy.attach_to_role(self.task_role)

        self.launcher_role = iam.Role.from_role_arn(
            scope, construct_id("LauncherLambdaRole", key), launcher_role_arn
        )
        self.service_control_policy.attach_to_role(self.launcher_role)

        # The launcher never edits DNS; only the task's own role gets this.
        self.route53_policy = iam.Policy(
            scope,
            construct_id("IamRoute53Policy", key),
            statements=[
                iam.PolicyStatement.from_json(
                    policy_generator.generate_route53_statement(hosted_zone_id)
                )
            ],
        )
        self.route53_policy.attach_to_role(self.task_role)

        logger.debug("Defined Minecraft server %s as service %s", key, server.service_name)

    @staticmethod
    def _data_mount() -> ecs.MountPoint:
        return ecs.MountPoint(
            container_path=CONTAINER_DATA_PATH,
            source_volume=ECS_VOLUME_NAME,
            read_only=False,
        )
