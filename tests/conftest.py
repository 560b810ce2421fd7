"""
Pytest configuration and fixtures for the Minecraft fleet tests
"""
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

# Add src and the CDK app directory to the Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "infrastructure"))
sys.path.insert(0, str(project_root / "src"))

from ondemand_core.config import MinecraftServerDef, StackConfig, TwilioConfig  # noqa: E402
from ondemand_core.errors import ParameterNotFoundError  # noqa: E402

TEST_ACCOUNT = "123456789012"
HOSTED_ZONE_ID = "Z0123456789ABCDEFGHIJ"


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: fast tests of plain Python logic"
    )
    config.addinivalue_line(
        "markers", "cdk: tests that synthesize the CDK stack (need Node.js)"
    )


class RecordingResolver:
    """Dictionary-backed parameter resolver that records every lookup."""

    def __init__(self, values: Dict[Tuple[str, str], str]):
        self.values = dict(values)
        self.calls: List[Tuple[str, str]] = []

    def resolve(self, name: str, region: str) -> str:
        self.calls.append((name, region))
        try:
            return self.values[(name, region)]
        except KeyError:
            raise ParameterNotFoundError(name, region) from None


def launcher_role_arn(key: str) -> str:
    return f"arn:aws:iam::{TEST_ACCOUNT}:role/launcher-{key}"


def domain_stack_parameters(keys) -> Dict[Tuple[str, str], str]:
    values = {("MinecraftHostedZoneID", "us-east-1"): HOSTED_ZONE_ID}
    for key in keys:
        values[(f"LauncherLambdaRoleArn-{key}", "us-east-1")] = launcher_role_arn(key)
    return values


def make_config(
    servers: Optional[Dict[str, MinecraftServerDef]] = None,
    **overrides,
) -> StackConfig:
    settings = dict(
        domain_name="mc.example.com",
        server_region="us-east-1",
        twilio=TwilioConfig(),
        minecraft_server_defs=servers or {},
    )
    settings.update(overrides)
    return StackConfig(**settings)


def server_def(cpu=512, memory=1024, **kwargs) -> MinecraftServerDef:
    return MinecraftServerDef(cpu=cpu, memory=memory, **kwargs)


@pytest.fixture
def resolver_for():
    """Factory for a RecordingResolver that knows the domain stack parameters of the given keys."""
    def _factory(keys) -> RecordingResolver:
        return RecordingResolver(domain_stack_parameters(keys))
    return _factory


@pytest.fixture(scope="session", autouse=True)
def aws_credentials():
    """Fake credentials so boto3 never reaches a real account"""
    import os

    for key, value in {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }.items():
        os.environ.setdefault(key, value)
