"""MCP tools manager.

Detects which MCP tool providers are usable, activates them concurrently and
combines their tools into a single mapping that can be handed to the
completion workflow.

Example:
    from ai_sdk_tools import create_mcp_tools

    result = await create_mcp_tools()  # auto-detect from the environment
    logger.info(f"Enabled MCP tools: {result.enabled_sources}")
    try:
        answer = await client.generate_text("How do I use React Query?", tools=result.tools)
    finally:
        await result.close()

    # With explicit configuration
    result = await create_mcp_tools({"context7": {"api_key": "my-api-key"}})
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from functools import partial
from typing import Any

from .config import MCPToolsManagerConfig, ProviderMode, ProviderSetting
from .errors import ActivationError, CloseError, ToolsAlreadyClosedError
from .providers import ProviderTools, ToolProvider, default_providers

logger = logging.getLogger(__name__)


class MCPToolsResult:
    """Combined tools from all activated providers.

    Attributes:
        tools: Tool name -> invocable tool descriptor, across all providers.
        enabled_sources: Providers that actually activated, in priority order.
        failures: Provider name -> error, for providers that failed to activate.
    """

    def __init__(
        self,
        tools: dict[str, Any],
        enabled_sources: list[str],
        closers: list[tuple[str, Callable[[], Awaitable[None]]]],
        failures: dict[str, BaseException] | None = None,
    ):
        self.tools = tools
        self.enabled_sources = enabled_sources
        self.failures = failures or {}
        self._closers = closers
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close every provider connection.

        All connections are closed concurrently and every one is attempted
        even if others fail.

        Raises:
            CloseError: After all closes finished, if any of them failed.
            ToolsAlreadyClosedError: If called more than once.
        """
        if self._closed:
            raise ToolsAlreadyClosedError("MCP tools have already been closed")
        self._closed = True

        if not self._closers:
            return

        results = await asyncio.gather(
            *(close() for _, close in self._closers), return_exceptions=True
        )

        failures: dict[str, BaseException] = {}
        for (name, _), outcome in zip(self._closers, results):
            if isinstance(outcome, BaseException):
                logger.warning(f"Error closing MCP provider '{name}': {outcome!r}")
                failures[name] = outcome

        if failures:
            raise CloseError(failures)
        logger.info(f"Closed {len(self._closers)} MCP provider connection(s)")

    async def __aenter__(self) -> "MCPToolsResult":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"MCPToolsResult(enabled_sources={self.enabled_sources!r}, "
            f"tools={sorted(self.tools)!r}, closed={self._closed})"
        )


class MCPToolsManager:
    """Activates MCP tool providers and merges their tools.

    ``providers`` fixes the priority order: it decides the order of
    ``enabled_sources`` and which provider keeps a tool name claimed by more
    than one provider (the first one). Each activate_all() call opens its own
    connections; nothing is shared between calls.
    """

    def __init__(
        self,
        providers: Sequence[ToolProvider] | None = None,
        activation_timeout: float | None = None,
    ):
        self.providers = list(providers) if providers is not None else default_providers()
        self.activation_timeout = activation_timeout

        names = [provider.name for provider in self.providers]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate MCP provider names: {duplicates}")

    def list_available(self) -> list[str]:
        """Names of providers detected from the environment alone."""
        return [provider.name for provider in self.providers if provider.is_available()]

    def _should_activate(self, provider: ToolProvider, setting: ProviderSetting) -> bool:
        if setting.mode is ProviderMode.DISABLED:
            logger.debug(f"MCP provider '{provider.name}' disabled by configuration")
            return False
        if setting.mode is ProviderMode.ENABLED:
            return True
        if provider.is_available():
            return True
        logger.debug(f"MCP provider '{provider.name}' not configured, skipping")
        return False

    async def _activate_one(
        self, provider: ToolProvider, setting: ProviderSetting, timeout: float
    ) -> ProviderTools:
        logger.debug(f"Activating MCP provider '{provider.name}' (timeout {timeout:g}s)")
        try:
            return await asyncio.wait_for(provider.activate(setting.settings), timeout)
        except asyncio.TimeoutError as e:
            raise ActivationError(provider.name, f"timed out after {timeout:g}s") from e

    async def activate_all(
        self, config: MCPToolsManagerConfig | Mapping[str, Any] | None = None
    ) -> MCPToolsResult:
        """Activate every selected provider and combine their tools.

        Provider failures (missing configuration, connection errors, timeouts)
        are logged and leave the provider out of the result; they are never
        raised from here.
        """
        manager_config = MCPToolsManagerConfig.from_mapping(config)
        timeout = self.activation_timeout or manager_config.activation_timeout

        known = {provider.name for provider in self.providers}
        for name in manager_config.providers:
            if name not in known:
                logger.warning(f"Ignoring configuration for unknown MCP provider '{name}'")

        selected = []
        for provider in self.providers:
            setting = manager_config.setting_for(provider.name)
            if self._should_activate(provider, setting):
                selected.append((provider, setting))

        outcomes = await asyncio.gather(
            *(self._activate_one(provider, setting, timeout) for provider, setting in selected),
            return_exceptions=True,
        )

        tools: dict[str, Any] = {}
        owners: dict[str, str] = {}
        closers: list[tuple[str, Callable[[], Awaitable[None]]]] = []
        enabled_sources: list[str] = []
        failures: dict[str, BaseException] = {}

        for (provider, _), outcome in zip(selected, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Failed to connect to MCP provider '{provider.name}': {outcome}")
                failures[provider.name] = outcome
                continue

            for tool_name, tool in outcome.tools.items():
                if tool_name in tools:
                    logger.warning(
                        f"MCP tool '{tool_name}' from provider '{provider.name}' conflicts with "
                        f"provider '{owners[tool_name]}', keeping '{owners[tool_name]}'"
                    )
                    continue
                tools[tool_name] = tool
                owners[tool_name] = provider.name

            closers.append((provider.name, partial(provider.close, outcome)))
            enabled_sources.append(provider.name)

        logger.info(
            f"MCP tools ready: {len(enabled_sources)} source(s) {enabled_sources}, "
            f"{len(tools)} tool(s)"
        )
        return MCPToolsResult(tools, enabled_sources, closers, failures)


async def create_mcp_tools(
    config: MCPToolsManagerConfig | Mapping[str, Any] | None = None,
) -> MCPToolsResult:
    """Create tools from every enabled or auto-detected MCP provider.

    The caller must await ``result.close()`` exactly once when done.
    """
    return await MCPToolsManager().activate_all(config)


def get_available_mcp_tools() -> list[str]:
    """Check which MCP tool providers are available based on the environment."""
    return MCPToolsManager().list_available()
