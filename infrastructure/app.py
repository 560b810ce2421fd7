#!/usr/bin/env python3
"""
AWS CDK App for the Minecraft on-demand server fleet
"""
import logging
import os

import aws_cdk as cdk

from ondemand_core.config import get_config, load_environment_file, string_as_boolean
from stacks.minecraft_stack import MinecraftStack


# Logging must be configured before the config is parsed
load_environment_file()
logging.basicConfig(
    level=logging.DEBUG if string_as_boolean(os.environ.get("DEBUG")) else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("minecraft-ondemand")

config = get_config()

app = cdk.App()

# Account comes from the CLI profile; servers run in the configured region
env_config = cdk.Environment(
    account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
    region=config.server_region,
)

logger.info(
    "Synthesizing %d Minecraft server(s) for %s in %s",
    len(config.minecraft_server_defs),
    config.domain_name or "<no domain>",
    config.server_region,
)

# Definition errors propagate so synth exits non-zero with the cause
minecraft_stack = MinecraftStack(
    app,
    "minecraft-server-stack",
    config=config,
    env=env_config,
    description="Minecraft on-demand servers on ECS Fargate",
)

app.synth()
