"""
Cross-stack parameter resolution

Values such as the Route 53 hosted zone id and the launcher lambda role ARN
are published as SSM parameters by the separately deployed domain stack.
Consumers depend on the ParameterResolver capability; MemoizingResolver
guarantees one lookup per (name, region) for the lifetime of a build.
"""
import logging
from typing import Callable, Dict, Optional, Protocol, Tuple

import boto3
from botocore.exceptions import ClientError

from .errors import ParameterNotFoundError

logger = logging.getLogger(__name__)


class ParameterResolver(Protocol):
    def resolve(self, name: str, region: str) -> str:
        """Return the parameter value or raise ParameterNotFoundError."""
        ...


class MemoizingResolver:
    """Caches every successful lookup of the wrapped resolver by (name, region)."""

    def __init__(self, resolver: ParameterResolver):
        self._resolver = resolver
        self._cache: Dict[Tuple[str, str], str] = {}

    def resolve(self, name: str, region: str) -> str:
        cache_key = (name, region)
        if cache_key not in self._cache:
            self._cache[cache_key] = self._resolver.resolve(name, region)
        else:
            logger.debug("Parameter %s (%s) served from cache", name, region)
        return self._cache[cache_key]

    @property
    def resolved(self) -> Dict[Tuple[str, str], str]:
        return dict(self._cache)


class SsmParameterResolver:
    """Reads SSM parameters directly with boto3, one client per region."""

    def __init__(self, client_factory: Optional[Callable[[str], object]] = None):
        self._client_factory = client_factory or (
            lambda region: boto3.client("ssm", region_name=region)
        )
        self._clients: Dict[str, object] = {}

    def _client(self, region: str):
        if region not in self._clients:
            self._clients[region] = self._client_factory(region)
        return self._clients[region]

    def resolve(self, name: str, region: str) -> str:
        logger.info("Looking up SSM parameter %s in %s", name, region)
        try:
            response = self._client(region).get_parameter(Name=name)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ParameterNotFound":
                raise ParameterNotFoundError(name, region) from e
            raise
        return response["Parameter"]["Value"]
