#!/usr/bin/env python3
"""
Inventaire des nœuds Nomad
Liste les nœuds éligibles/inéligibles avec ou sans agent Consul
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from nomad_nodes.config.logging_config import get_logger, setup_logging
from nomad_nodes.config.nomad_config import load_settings
from nomad_nodes.core.errors import ConfigError, NomadAPIError, PipelineError
from nomad_nodes.core.models import FilterPredicate
from nomad_nodes.core.nomad_client import NomadClient
from nomad_nodes.core.pipeline import InventoryPipeline
from nomad_nodes.core.reporter import ReportStats

logger = get_logger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nomad-nodes",
        description="Query every Nomad node concurrently and report the ones matching the filters"
    )
    parser.add_argument("--consul", action="store_true", help="Return nodes that have a working Consul agent.")
    parser.add_argument("--ineligible", action="store_true", help="Return nodes that are ineligible.")
    parser.add_argument("--address", type=str, default=None, help="Nomad HTTP API address (overrides NOMAD_ADDR)")
    parser.add_argument("--token", type=str, default=None, help="ACL token (overrides NOMAD_TOKEN)")
    parser.add_argument("--region", type=str, default=None, help="Nomad region")
    parser.add_argument("--namespace", type=str, default=None, help="Nomad namespace")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--max-concurrency", type=int, default=None,
                        help="Cap on in-flight node queries (default: one per node)")
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--log-level", type=str, default=None, help="Log level: DEBUG, INFO, WARNING, ERROR")
    return parser

async def run_inventory(args: argparse.Namespace) -> ReportStats:
    settings = load_settings(
        config_file=args.config,
        overrides={
            "address": args.address,
            "token": args.token,
            "region": args.region,
            "namespace": args.namespace,
            "timeout": args.timeout,
            "max_concurrency": args.max_concurrency,
        },
    )
    predicate = FilterPredicate(want_consul=args.consul, want_ineligible=args.ineligible)
    async with NomadClient(settings) as client:
        pipeline = InventoryPipeline(
            client,
            predicate,
            timeout=settings.timeout,
            max_concurrency=settings.max_concurrency
        )
        return await pipeline.run()

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        asyncio.run(run_inventory(args))
    except ConfigError as e:
        print(f"failed to initialize Nomad client: {e}", file=sys.stderr)
        return 1
    except NomadAPIError as e:
        print(f"failed to list Nomad nodes: {e}", file=sys.stderr)
        return 1
    except PipelineError as e:
        print(f"inventory aborted: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    return 0

if __name__ == "__main__":
    sys.exit(main())
