"""Command-line interface for Tenant Orchestrator."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from tenant_orchestrator import __version__, config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the Tenant Orchestrator CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = argparse.ArgumentParser(
        prog="tenant-orchestrator",
        description="Tenant Orchestrator - per-tenant container provisioning"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    api_parser = subparsers.add_parser(
        "api",
        help="Run the API server"
    )
    api_parser.add_argument(
        "--host",
        default=config.API_HOST,
        help=f"Host to bind to (default: {config.API_HOST})"
    )
    api_parser.add_argument(
        "--port",
        type=int,
        default=config.API_PORT,
        help=f"Port to bind to (default: {config.API_PORT})"
    )

    templates_parser = subparsers.add_parser(
        "templates",
        help="Print the template catalog as JSON"
    )
    templates_parser.add_argument(
        "--file",
        default=config.TEMPLATES_FILE,
        help="Catalog JSON file (default: built-in templates or $TEMPLATES_FILE)"
    )

    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    args = parser.parse_args(argv)

    if args.command == "api":
        from tenant_orchestrator.api import run_server

        run_server(host=args.host, port=args.port)
        return 0

    elif args.command == "templates":
        from tenant_orchestrator.core.templates import load_catalog

        try:
            catalog = load_catalog(args.file)
        except (OSError, TypeError, ValueError) as e:
            print(f"Cannot load templates: {e}", file=sys.stderr)
            return 1
        print(json.dumps([t.model_dump() for t in catalog.list()], indent=2))
        return 0

    elif args.command == "version":
        print(f"Tenant Orchestrator version {__version__}")
        return 0

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
