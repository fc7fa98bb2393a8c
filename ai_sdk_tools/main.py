"""Command-line entry point for ai-sdk-tools."""

import argparse
import asyncio
import logging
import sys
from typing import Any

from .completion import CompletionClient
from .config import MCPToolsManagerConfig, ProviderSetting, load_config
from .errors import CloseError
from .manager import MCPToolsManager, MCPToolsResult

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Log to stderr so stdout only carries command output."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party library messages
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)


def build_manager_config(
    config: dict[str, Any], enable: list[str] | None = None, disable: list[str] | None = None
) -> MCPToolsManagerConfig:
    """Read the tools.mcp config section and apply command-line overrides."""
    manager_config = MCPToolsManagerConfig.from_app_config(config)
    for name in enable or []:
        current = manager_config.setting_for(name)
        # Keep explicit settings from the config file
        if current.settings is None:
            manager_config.providers[name] = ProviderSetting.enabled()
    for name in disable or []:
        manager_config.providers[name] = ProviderSetting.disabled()
    return manager_config


async def _close_tools(result: MCPToolsResult) -> None:
    try:
        await result.close()
    except CloseError as e:
        logger.warning(str(e))


async def show_tools(manager_config: MCPToolsManagerConfig) -> int:
    """Activate providers and print the tools they expose."""
    result = await MCPToolsManager().activate_all(manager_config)
    try:
        print(f"Enabled sources: {', '.join(result.enabled_sources) or '(none)'}")
        for name, error in result.failures.items():
            print(f"Failed: {name}: {error}")
        for name in sorted(result.tools):
            definition = result.tools[name].definition
            description = definition["description"].strip().splitlines()
            print(f"  {name}: {description[0] if description else ''}")
    finally:
        await _close_tools(result)
    return 0 if result.enabled_sources or not result.failures else 1


async def cli_message(
    message: str, config: dict[str, Any], manager_config: MCPToolsManagerConfig
) -> int:
    """Answer a single message using every available MCP tool."""
    client = CompletionClient(config)
    result = await MCPToolsManager().activate_all(manager_config)
    try:
        if result.enabled_sources:
            logger.info(f"Enabled MCP tools: {result.enabled_sources}")
        answer = await client.generate_text(message, tools=result.tools)
        print(answer)
    finally:
        await _close_tools(result)
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ai-sdk-tools - MCP tool providers for LLM completion workflows"
    )
    parser.add_argument(
        "--list-available",
        action="store_true",
        help="List MCP providers detected from the environment",
    )
    parser.add_argument(
        "--show-tools",
        action="store_true",
        help="Connect to enabled MCP providers and list their tools",
    )
    parser.add_argument("--message", type=str, help="Answer a message using the MCP tools")
    parser.add_argument("--config", type=str, help="Path to JSON config file")
    parser.add_argument(
        "--enable", action="append", metavar="NAME", help="Force-enable a provider"
    )
    parser.add_argument(
        "--disable", action="append", metavar="NAME", help="Disable a provider"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    config = load_config(args.config) if args.config else {}
    try:
        manager_config = build_manager_config(config, args.enable, args.disable)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    if args.list_available:
        for name in MCPToolsManager().list_available():
            print(name)
    elif args.show_tools:
        sys.exit(asyncio.run(show_tools(manager_config)))
    elif args.message:
        sys.exit(asyncio.run(cli_message(args.message, config, manager_config)))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
