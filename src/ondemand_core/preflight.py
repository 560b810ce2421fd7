#!/usr/bin/env python3
"""
Preflight check for a Minecraft fleet deployment
Validates the server definitions and confirms that every cross-stack
parameter the stack will read exists in the domain stack region
"""
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import StackConfig, load_environment_file, resolve_config
from .errors import ConfigurationError, ParameterNotFoundError
from .naming import DOMAIN_STACK_REGION, HOSTED_ZONE_SSM_PARAMETER
from .parameters import MemoizingResolver, ParameterResolver, SsmParameterResolver
from .planning import plan_topology

logger = logging.getLogger(__name__)


class PreflightCheck:
    """Runs the same planning and parameter lookups the stack performs at deploy time."""

    def __init__(self, config: StackConfig, resolver: ParameterResolver):
        self.config = config
        self.resolver = MemoizingResolver(resolver)

    def run(self) -> Dict[str, Any]:
        report: Dict[str, Any] = {
            "status": "PASS",
            "edition": self.config.minecraft_edition,
            "account_defaults": {
                "cpu": self.config.task_cpu,
                "memory": self.config.task_memory,
            },
            "notifications": bool(self.config.sns_email_address),
            "servers": {},
            "errors": [],
        }

        try:
            plan = plan_topology(self.config)
        except ConfigurationError as e:
            report["status"] = "FAIL"
            report["errors"].append(str(e))
            return report

        report["ingress_editions"] = list(plan.ingress_editions)

        hosted_zone_id = self._lookup(HOSTED_ZONE_SSM_PARAMETER, report["errors"])
        report["hosted_zone_id"] = hosted_zone_id

        for server in plan.servers:
            report["servers"][server.key] = {
                "service": server.service_name,
                "hostname": server.hostname(self.config.domain_name),
                "cpu": server.cpu,
                "memory": server.memory,
                "launcher_role_arn": self._lookup(server.launcher_role_parameter, report["errors"]),
            }

        if report["errors"]:
            report["status"] = "FAIL"
        return report

    def _lookup(self, name: str, errors: List[str]) -> Optional[str]:
        try:
            return self.resolver.resolve(name, DOMAIN_STACK_REGION)
        except ParameterNotFoundError as e:
            errors.append(str(e))
        except (ClientError, BotoCoreError) as e:
            errors.append(f"Unable to read parameter '{name}': {e}")
        return None


def print_report(report: Dict[str, Any]) -> None:
    print(f"Edition: {report['edition']}")
    print(f"Notifications: {'enabled' if report['notifications'] else 'disabled'}")
    if report.get("hosted_zone_id"):
        print(f"Hosted zone: {report['hosted_zone_id']}")
    for key, server in report["servers"].items():
        print(
            f"  ✓ {key}: {server['service']} ({server['cpu']} CPU / {server['memory']} MiB)"
            f" at {server['hostname']}"
        )
    if not report["servers"]:
        print(
            "  No servers defined (account defaults: "
            f"{report['account_defaults']['cpu']} CPU / {report['account_defaults']['memory']} MiB)"
        )
    for error in report["errors"]:
        print(f"  ✗ {error}")
    print("✅ Preflight passed" if report["status"] == "PASS" else "❌ Preflight failed")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check a Minecraft fleet configuration before deploying")
    parser.add_argument(
        "--env-file",
        help="Path to a .env file (default: .env at the repository root)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    load_environment_file(args.env_file)
    try:
        config = resolve_config()
    except ConfigurationError as e:
        print(f"❌ Invalid configuration: {e}")
        return 1

    report = PreflightCheck(config, SsmParameterResolver()).run()
    print_report(report)
    return 0 if report["status"] == "PASS" else 1


if __name__ == "__main__":
    sys.exit(main())
