"""
ECS cluster and the service security group shared by all servers
"""
from typing import Set

from aws_cdk import aws_ec2 as ec2, aws_ecs as ecs
from constructs import Construct

from ondemand_core.editions import MinecraftEditionConfig
from ondemand_core.naming import CLUSTER_NAME


class ComputeCluster:
    def __init__(self, scope: Construct, vpc: ec2.IVpc):
        self.cluster = ecs.Cluster(
            scope,
            "Cluster",
            cluster_name=CLUSTER_NAME,
            vpc=vpc,
            enable_fargate_capacity_providers=True,
        )

        self.service_security_group = ec2.SecurityGroup(
            scope,
            "ServiceSecurityGroup",
            vpc=vpc,
            description="Security group for Minecraft on-demand",
        )

        self._open_ports: Set[str] = set()

    def open_ingress(self, edition_config: MinecraftEditionConfig) -> bool:
        """
        Open the edition's game port to the internet.

        Servers of the same edition share the rule; returns False when the
        rule already exists.
        """
        rule_key = f"{edition_config.protocol}/{edition_config.port}"
        if rule_key in self._open_ports:
            return False

        if edition_config.protocol == "udp":
            port = ec2.Port.udp(edition_config.port)
        else:
            port = ec2.Port.tcp(edition_config.port)

        self.service_security_group.add_ingress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=port,
            description=edition_config.ingress_rule_description,
        )
        self._open_ports.add(rule_key)
        return True
