"""
CLI Module

Architectural Intent:
- Command-line entry point and process bootstrap for ncloud-mcp
- Default command serves MCP over stdio; stdout is reserved for protocol
  traffic, so every human-facing message goes to stderr while serving
- Missing credentials are the only fatal startup condition
- Supports --verbose/--debug flags for log level control
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from typing import Optional

from ncloud_mcp.domain.errors import ConfigurationError
from ncloud_mcp.domain.services.action_catalog import list_descriptors
from ncloud_mcp.infrastructure.config import load_config, load_credentials
from ncloud_mcp.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ncloud-mcp",
        description="MCP server for NAVER Cloud Platform compute, network and database APIs",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs on stderr"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Serve MCP over stdio (default)")

    tools_parser = subparsers.add_parser("tools", help="List available tools")
    tools_parser.add_argument(
        "--json", action="store_true", help="Print the full tools/list schema"
    )

    call_parser = subparsers.add_parser("call", help="Invoke a single tool and exit")
    call_parser.add_argument("name", help="Tool name, e.g. list_servers")
    call_parser.add_argument(
        "--arguments", "-a", default="{}", help="Tool arguments as a JSON object"
    )

    return parser


def _configure_logging(args: argparse.Namespace, config) -> None:
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = config.log_level
    configure_logging(level=level, json_format=args.json_logs or config.log_json)


def _print_tools(as_json: bool) -> None:
    descriptors = list_descriptors()
    if as_json:
        tools = [
            {
                "name": d.name,
                "description": d.description,
                "inputSchema": d.input_schema(),
            }
            for d in descriptors
        ]
        print(json.dumps({"tools": tools}, indent=2, ensure_ascii=False))
        return
    for d in descriptors:
        print(f"  - {d.name}: {d.description}")


async def async_main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "serve"

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _configure_logging(args, config)
    verbose = args.verbose or args.debug

    if command == "tools":
        _print_tools(args.json)
        return 0

    try:
        credentials = load_credentials()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    from ncloud_mcp.composition_root import create_container

    try:
        container = create_container(config, credentials)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    await container.telemetry.initialize()

    try:
        if command == "call":
            try:
                arguments = json.loads(args.arguments)
            except json.JSONDecodeError as e:
                print(f"Error: --arguments is not valid JSON: {e}", file=sys.stderr)
                return 2

            envelope = await container.dispatcher.invoke(args.name, arguments)
            print(envelope.text)
            return 1 if envelope.is_error else 0

        from ncloud_mcp.infrastructure.mcp_servers.stdio_transport import run_stdio

        print(
            f"NCP Extended MCP Server running on stdio ({config.api.url})",
            file=sys.stderr,
        )
        await run_stdio(container.server)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        if verbose:
            traceback.print_exc()
        return 1
    finally:
        await container.aclose()


def main() -> None:
    try:
        status = asyncio.run(async_main())
    except KeyboardInterrupt:
        status = 130
    sys.exit(status)


if __name__ == "__main__":
    main()
