"""
Deploy-time SSM parameter lookup

The value is read by a custom resource inside the target account when the
stack is deployed, not on the machine that synthesizes it. A missing
parameter makes the SSM call fail, which fails the deployment.
"""
import re
import time
from typing import Optional

from aws_cdk import ArnFormat, Stack
from aws_cdk import custom_resources as cr
from constructs import Construct


class SSMParameterReader(cr.AwsCustomResource):
    """Reads one SSM parameter, possibly from another region."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        parameter_name: str,
        region: str,
        refresh_token: Optional[str] = None,
    ) -> None:
        stack = Stack.of(scope)
        parameter_arn = stack.format_arn(
            service="ssm",
            region=region,
            resource="parameter",
            resource_name=parameter_name.lstrip("/"),
            arn_format=ArnFormat.SLASH_RESOURCE_NAME,
        )

        sdk_call = cr.AwsSdkCall(
            service="SSM",
            action="getParameter",
            parameters={"Name": parameter_name},
            region=region,
            # A new physical id per synth re-reads the value on every deploy.
            physical_resource_id=cr.PhysicalResourceId.of(
                refresh_token or str(int(time.time()))
            ),
        )

        super().__init__(
            scope,
            construct_id,
            on_update=sdk_call,
            policy=cr.AwsCustomResourcePolicy.from_sdk_calls(resources=[parameter_arn]),
            install_latest_aws_sdk=False,
        )

    def get_parameter_value(self) -> str:
        return self.get_response_field("Parameter.Value")


class CustomResourceParameterResolver:
    """ParameterResolver that creates one SSMParameterReader per lookup."""

    def __init__(self, scope: Construct, refresh_token: Optional[str] = None):
        self.scope = scope
        self.refresh_token = refresh_token

    def resolve(self, name: str, region: str) -> str:
        reader = SSMParameterReader(
            self.scope,
            _reader_id(name, region),
            parameter_name=name,
            region=region,
            refresh_token=self.refresh_token,
        )
        return reader.get_parameter_value()


def _reader_id(name: str, region: str) -> str:
    return "ParameterReader-" + re.sub(r"[^A-Za-z0-9-]", "-", f"{name.strip('/')}-{region}")
