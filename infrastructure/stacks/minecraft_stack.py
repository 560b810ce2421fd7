"""
Minecraft on-demand stack
One shared VPC, EFS and ECS cluster with an isolated Fargate service per configured server
"""
import logging
from typing import Dict, Optional

from aws_cdk import (
    Aws,
    CfnOutput,
    Stack,
    aws_ec2 as ec2,
)
from constructs import Construct

from ondemand_core.config import StackConfig
from ondemand_core.editions import get_minecraft_server_config
from ondemand_core import naming
from ondemand_core.parameters import MemoizingResolver, ParameterResolver
from ondemand_core.planning import ServerPlan, TopologyPlan, plan_topology
from ondemand_core.policies import FleetPolicyGenerator

from components.compute_cluster import ComputeCluster
from components.maintenance_access import MaintenanceAccess
from components.notifications import NotificationFanout
from components.parameter_reader import CustomResourceParameterResolver
from components.server_service import MinecraftServerService
from components.shared_storage import SharedStorage

logger = logging.getLogger(__name__)


class MinecraftStack(Stack):
    """
    Shared infrastructure is created once; each key of
    ``config.minecraft_server_defs`` adds one MinecraftServerService.

    Every server definition is validated before any construct is added, so
    a bad definition aborts synthesis without a partial stack.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: StackConfig,
        parameter_resolver: Optional[ParameterResolver] = None,
        **kwargs,
    ) -> None:
        plan = plan_topology(config)
        super().__init__(scope, construct_id, **kwargs)

        self.plan: TopologyPlan = plan

        self.config = config
        self.parameters = MemoizingResolver(
            parameter_resolver or CustomResourceParameterResolver(self)
        )
        self.policy_generator = FleetPolicyGenerator(Aws.PARTITION, Aws.REGION, Aws.ACCOUNT_ID)

        self.vpc = self._create_vpc()
        self.storage = SharedStorage(self, self.vpc, self.policy_generator)
        self.compute = ComputeCluster(self, self.vpc)
        self.maintenance = MaintenanceAccess(self, self.vpc, self.storage, self.policy_generator)

        self.hosted_zone_id = self.parameters.resolve(
            naming.HOSTED_ZONE_SSM_PARAMETER, naming.DOMAIN_STACK_REGION
        )
        self.notifications = NotificationFanout(self, config.sns_email_address)

        for edition in self.plan.ingress_editions:
            self.compute.open_ingress(get_minecraft_server_config(edition))

        self.servers: Dict[str, MinecraftServerService] = {}
        for server in self.plan.servers:
            self.servers[server.key] = self._create_server(server)

        self._create_outputs()

    def _create_vpc(self) -> ec2.IVpc:
        if self.config.vpc_id:
            logger.info("Using existing VPC %s", self.config.vpc_id)
            return ec2.Vpc.from_lookup(self, "Vpc", vpc_id=self.config.vpc_id)

        # Public subnets only: no NAT gateway charges.
        return ec2.Vpc(
            self,
            "Vpc",
            max_azs=3,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=24,
                )
            ],
        )

    def _create_server(self, server: ServerPlan) -> MinecraftServerService:
        launcher_role_arn = self.parameters.resolve(
            server.launcher_role_parameter, naming.DOMAIN_STACK_REGION
        )
        service = MinecraftServerService(
            self,
            server=server,
            config=self.config,
            cluster=self.compute,
            storage=self.storage,
            notifications=self.notifications.channel,
            hosted_zone_id=self.hosted_zone_id,
            launcher_role_arn=launcher_role_arn,
            policy_generator=self.policy_generator,
        )
        self.notifications.grant_publish(service.task_role)
        return service

    def _create_outputs(self) -> None:
        CfnOutput(
            self,
            "ClusterName",
            value=self.compute.cluster.cluster_name,
            description="ECS cluster shared by all Minecraft servers",
        )
        CfnOutput(
            self,
            "FileSystemId",
            value=self.storage.file_system.file_system_id,
            description="Shared EFS file system",
        )
        CfnOutput(
            self,
            "AccessPointId",
            value=self.storage.access_point.access_point_id,
            description="EFS access point mounted by the servers",
        )
        CfnOutput(
            self,
            "MaintenanceLaunchTemplateId",
            value=self.maintenance.launch_template.launch_template_id or "",
            description="Launch template for EFS maintenance instances",
        )
        for key, service in self.servers.items():
            CfnOutput(
                self,
                naming.construct_id("ServiceName", key),
                value=service.service.service_name,
                description=f"Fargate service for {key}.{self.config.domain_name}",
            )
