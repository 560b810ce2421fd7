"""
Optional e-mail notifications for server state changes
"""
from typing import Optional

from aws_cdk import aws_iam as iam, aws_sns as sns
from constructs import Construct

from ondemand_core.planning import NOTIFICATIONS_DISABLED, NotificationChannel


class NotificationFanout:
    """Creates a topic with one e-mail subscription, only when an address is configured."""

    def __init__(self, scope: Construct, email_address: Optional[str]):
        self.topic: Optional[sns.Topic] = None
        self.subscription: Optional[sns.Subscription] = None

        if not email_address:
            self.channel = NOTIFICATIONS_DISABLED
            return

        self.topic = sns.Topic(
            scope,
            "ServerSnsTopic",
            display_name="Minecraft Server Notifications",
        )
        self.subscription = sns.Subscription(
            scope,
            "EmailSubscription",
            protocol=sns.SubscriptionProtocol.EMAIL,
            topic=self.topic,
            endpoint=email_address,
        )
        self.channel = NotificationChannel(topic_arn=self.topic.topic_arn)

    def grant_publish(self, grantee: iam.IGrantable) -> None:
        if self.topic is not None:
            self.topic.grant_publish(grantee)
