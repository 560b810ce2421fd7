"""
IAM Policy Generator for the Minecraft server fleet
Generates least privilege policy statements for tasks, the launcher and the maintenance host
"""
from typing import Any, Dict, List

from .naming import CLUSTER_NAME

SSM_MANAGED_INSTANCE_ACTIONS = [
    "ssm:DescribeAssociation",
    "ssm:GetDeployablePatchSnapshotForInstance",
    "ssm:GetDocument",
    "ssm:DescribeDocument",
    "ssm:GetManifest",
    "ssm:GetParameter",
    "ssm:GetParameters",
    "ssm:ListAssociations",
    "ssm:ListInstanceAssociations",
    "ssm:PutInventory",
    "ssm:PutComplianceItems",
    "ssm:PutConfigurePackageResult",
    "ssm:UpdateAssociationStatus",
    "ssm:UpdateInstanceAssociationStatus",
    "ssm:UpdateInstanceInformation",
    "ssmmessages:CreateControlChannel",
    "ssmmessages:CreateDataChannel",
    "ssmmessages:OpenControlChannel",
    "ssmmessages:OpenDataChannel",
    "ec2messages:AcknowledgeMessage",
    "ec2messages:DeleteMessage",
    "ec2messages:FailMessage",
    "ec2messages:GetEndpoint",
    "ec2messages:GetMessages",
    "ec2messages:SendReply",
]

ROUTE53_RECORD_ACTIONS = [
    "route53:GetHostedZone",
    "route53:ChangeResourceRecordSets",
    "route53:ListResourceRecordSets",
]


class FleetPolicyGenerator:
    """Generates IAM policy statements (JSON form) for the server fleet."""

    def __init__(self, partition: str, region: str, account_id: str):
        self.partition = partition
        self.region = region
        self.account_id = account_id

    def cluster_task_arn(self) -> str:
        """ARN pattern covering every task in the shared cluster."""
        return (
            f"arn:{self.partition}:ecs:{self.region}:{self.account_id}"
            f":task/{CLUSTER_NAME}/*"
        )

    def generate_efs_read_write_statement(
        self, file_system_arn: str, access_point_arn: str
    ) -> Dict[str, Any]:
        """Mount/write access that only holds when the caller presents the access point."""
        return {
            "Sid": "AllowReadWriteOnEFS",
            "Effect": "Allow",
            "Action": [
                "elasticfilesystem:ClientMount",
                "elasticfilesystem:ClientWrite",
                "elasticfilesystem:DescribeFileSystems",
            ],
            "Resource": file_system_arn,
            "Condition": {
                "StringEquals": {
                    "elasticfilesystem:AccessPointArn": access_point_arn
                }
            },
        }

    def generate_ssm_managed_instance_statement(self) -> Dict[str, Any]:
        """Session Manager / Run Command channels for the maintenance host."""
        return {
            "Sid": "AllowSSMManagedInstance",
            "Effect": "Allow",
            "Action": list(SSM_MANAGED_INSTANCE_ACTIONS),
            "Resource": "*",
        }

    def generate_service_control_statements(
        self, server_key: str, service_arn: str
    ) -> List[Dict[str, Any]]:
        """
        Start/stop rights for exactly one server's service.

        The service ARN is the isolation boundary between servers; the task
        wildcard only covers tasks of the shared cluster.
        """
        return [
            {
                "Sid": f"AllowAllOnServiceAndTask{_sid_suffix(server_key)}",
                "Effect": "Allow",
                "Action": ["ecs:*"],
                "Resource": [service_arn, self.cluster_task_arn()],
            },
            {
                "Effect": "Allow",
                "Action": ["ec2:DescribeNetworkInterfaces"],
                "Resource": "*",
            },
        ]

    def generate_route53_statement(self, hosted_zone_id: str) -> Dict[str, Any]:
        """A-record edit rights limited to one hosted zone."""
        return {
            "Sid": "AllowEditRecordSets",
            "Effect": "Allow",
            "Action": list(ROUTE53_RECORD_ACTIONS),
            "Resource": f"arn:{self.partition}:route53:::hostedzone/{hosted_zone_id}",
        }


def _sid_suffix(server_key: str) -> str:
    # Statement ids only allow alphanumerics.
    return "".join(part.capitalize() for part in server_key.split("-"))
