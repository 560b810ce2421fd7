"""
Exceptions raised while building the server fleet
"""
from typing import Optional


class ConfigurationError(Exception):
    """Base class for configuration problems that must abort the build."""


class ServerDefinitionError(ConfigurationError):
    """A tenant server definition is unusable."""

    def __init__(self, server_key: str, field: Optional[str], reason: str):
        self.server_key = server_key
        self.field = field
        if field:
            message = f"Minecraft server '{server_key}': field '{field}' {reason}"
        else:
            message = f"Minecraft server '{server_key}': {reason}"
        super().__init__(message)


class ParameterNotFoundError(LookupError):
    """A cross-stack parameter does not exist in the requested region."""

    def __init__(self, name: str, region: str):
        self.name = name
        self.region = region
        super().__init__(f"Parameter not found: '{name}' in region {region}")
