"""
Spot launch template for out-of-band maintenance of the shared file system
"""
from aws_cdk import aws_ec2 as ec2, aws_iam as iam, Stack
from constructs import Construct

from ondemand_core.policies import FleetPolicyGenerator
from ondemand_core.user_data import render_efs_maintenance_user_data

from .shared_storage import SharedStorage


class MaintenanceAccess:
    """
    Launch-on-demand host that mounts the shared EFS.

    Not part of the ECS cluster. Operators reach it through Session Manager,
    so its security group has no inbound rules.
    """

    def __init__(
        self,
        scope: Construct,
        vpc: ec2.IVpc,
        storage: SharedStorage,
        policy_generator: FleetPolicyGenerator,
    ):
        self.role = iam.Role(
            scope,
            "EFSMaintenanceRole",
            assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
            description="Minecraft EC2 instance role",
        )

        self.ssm_managed_instance_policy = iam.Policy(
            scope,
            "SSMManagedInstanceCorePolicy",
            statements=[
                iam.PolicyStatement.from_json(
                    policy_generator.generate_ssm_managed_instance_statement()
                )
            ],
        )
        self.ssm_managed_instance_policy.attach_to_role(self.role)
        storage.grant_read_write(self.role)

        self.security_group = ec2.SecurityGroup(
            scope,
            "EfsMaintenanceSecurityGroup",
            vpc=vpc,
            description="Security group for Minecraft on-demand EFS Maintenance Instances",
        )
        storage.allow_default_port_from(self.security_group)

        user_data = render_efs_maintenance_user_data(
            storage.file_system.file_system_id,
            Stack.of(scope).region,
        )

        self.launch_template = ec2.LaunchTemplate(
            scope,
            "EFSMaintenanceLaunchTemplate",
            user_data=ec2.UserData.custom(user_data),
            role=self.role,
            spot_options=ec2.LaunchTemplateSpotOptions(
                interruption_behavior=ec2.SpotInstanceInterruption.TERMINATE,
                request_type=ec2.SpotRequestType.ONE_TIME,
            ),
            security_group=self.security_group,
            instance_initiated_shutdown_behavior=ec2.InstanceInitiatedShutdownBehavior.TERMINATE,
        )
