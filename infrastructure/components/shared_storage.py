"""
Shared EFS file system and access point used by every Minecraft server
"""
from aws_cdk import (
    RemovalPolicy,
    aws_ec2 as ec2,
    aws_efs as efs,
    aws_iam as iam,
)
from constructs import Construct

from ondemand_core.naming import CONTAINER_DATA_PATH
from ondemand_core.policies import FleetPolicyGenerator

POSIX_UID = "1000"
POSIX_GID = "1000"


class SharedStorage:
    """One file system plus one access point pinned to /minecraft as uid/gid 1000."""

    def __init__(self, scope: Construct, vpc: ec2.IVpc, policy_generator: FleetPolicyGenerator):
        self.scope = scope

        # CloudFormation cannot snapshot EFS on delete: retain the file system
        # and let AWS Backup keep the snapshots.
        self.file_system = efs.FileSystem(
            scope,
            "FileSystem",
            vpc=vpc,
            removal_policy=RemovalPolicy.RETAIN,
            enable_automatic_backups=True,
        )

        self.access_point = efs.AccessPoint(
            scope,
            "AccessPoint",
            file_system=self.file_system,
            path=CONTAINER_DATA_PATH,
            posix_user=efs.PosixUser(uid=POSIX_UID, gid=POSIX_GID),
            create_acl=efs.Acl(owner_uid=POSIX_UID, owner_gid=POSIX_GID, permissions="0755"),
        )

        self.read_write_policy = iam.Policy(
            scope,
            "DataRWPolicy",
            statements=[
                iam.PolicyStatement.from_json(
                    policy_generator.generate_efs_read_write_statement(
                        self.file_system.file_system_arn,
                        self.access_point.access_point_arn,
                    )
                )
            ],
        )

    def grant_read_write(self, role: iam.IRole) -> None:
        self.read_write_policy.attach_to_role(role)

    def allow_default_port_from(self, other: ec2.IConnectable) -> None:
        self.file_system.connections.allow_default_port_from(other)
