"""Argument parsing, configuration loading, and run bootstrap."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from .config import build_config
from .exceptions import ConfigError, DiscoveryError
from .logging_config import configure_logging
from .runner import Runner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prometheus-elb-discovery",
        description="Write Prometheus file_sd target groups for the healthy instances behind an ELB",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to an optional YAML configuration file; flags override its values",
    )
    parser.add_argument("--elb", help="Load balancer to query")
    parser.add_argument("--region", help="AWS region to query (default: us-west-2)")
    parser.add_argument("--profile", help="AWS credential profile (default: boto3 credential chain)")
    parser.add_argument("--port", type=int, help="Port that is exposing /metrics (default: 80)")
    parser.add_argument(
        "--dest",
        help="File to write the target group JSON, e.g. tgroups/target_groups.json (default: '-' for stdout)",
    )
    parser.add_argument(
        "--tags",
        help=(
            "Comma separated list of tags to group by, e.g. Environment,Application "
            "(default: Name). Tag values may be given as Application,Environment=Production"
        ),
    )
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    parser.add_argument("--log-format", choices=("text", "json"), help="Logging format (default: text)")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the configuration and exit",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "aws": {"region": args.region, "credential_profile": args.profile},
        "targets": {
            "load_balancer": args.elb,
            "port": args.port,
            "dest": args.dest,
            "tags": args.tags,
        },
        "logging": {"level": args.log_level, "format": args.log_format},
    }


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load config (minimal logging until config is loaded)
    try:
        config = build_config(args.config, _overrides(args))
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(config.logging)

    if args.validate:
        logger.info("Configuration is valid")
        return 0

    try:
        Runner(config).run_once()
    except DiscoveryError as exc:
        logger.error("Fatal %s error: %s", exc.kind, exc, extra={"error_kind": exc.kind})
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    return 0
