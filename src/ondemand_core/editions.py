"""
Container image and network settings for each Minecraft edition
"""
from dataclasses import dataclass

from .config import BEDROCK_EDITION, JAVA_EDITION


@dataclass(frozen=True)
class MinecraftEditionConfig:
    image: str
    port: int
    protocol: str  # "tcp" or "udp"

    @property
    def ingress_rule_description(self) -> str:
        return f"Minecraft-Server-Ingress-{self.protocol.upper()}-{self.port}"


_EDITIONS = {
    JAVA_EDITION: MinecraftEditionConfig(
        image="itzg/minecraft-server",
        port=25565,
        protocol="tcp",
    ),
    BEDROCK_EDITION: MinecraftEditionConfig(
        image="itzg/minecraft-bedrock-server",
        port=19132,
        protocol="udp",
    ),
}


def get_minecraft_server_config(edition: str) -> MinecraftEditionConfig:
    """Look up the image/port/protocol triple for an edition."""
    try:
        return _EDITIONS[edition]
    except KeyError:
        raise ValueError(f"Unknown Minecraft edition: {edition!r}") from None
