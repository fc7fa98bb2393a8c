"""Base class for MCP tool providers."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ai_sdk_tools.errors import ActivationError
from ai_sdk_tools.mcp_client import MCPConnection, MCPServerConfig, MCPToolExecutor

logger = logging.getLogger(__name__)


@dataclass
class ProviderTools:
    """Tools exposed by one activated provider, plus how to release them."""

    tools: dict[str, MCPToolExecutor]
    close: Callable[[], Awaitable[None]]


class ToolProvider(ABC):
    """Adapter between one kind of external MCP server and the tools manager.

    Subclasses resolve their own configuration (explicit settings first, then
    the provider's environment variable) and describe how to reach the server.
    The adapter keeps no reference to the connections it opens; whoever calls
    activate() owns the returned close handle.
    """

    name: str = ""
    env_var: str = ""

    @abstractmethod
    def resolve_config(self, settings: Mapping[str, Any] | None = None) -> Any:
        """Merge explicit settings with the environment fallback.

        Raises:
            MissingConfigError: If a required value is available from neither.
        """

    @abstractmethod
    def server_config(self, config: Any) -> MCPServerConfig:
        """Build the MCP server configuration for a resolved provider config."""

    def is_available(self, settings: Mapping[str, Any] | None = None) -> bool:
        """Check whether resolve_config() would succeed. Performs no I/O."""
        try:
            self.resolve_config(settings)
        except Exception:
            return False
        return True

    async def activate(self, settings: Mapping[str, Any] | None = None) -> ProviderTools:
        """Connect to the provider's server and list its tools.

        Raises:
            MissingConfigError: If the configuration cannot be resolved.
            ActivationError: If connecting or listing tools fails.
        """
        config = self.resolve_config(settings)
        connection = MCPConnection(self.server_config(config))
        try:
            await connection.connect()
        except Exception as e:
            raise ActivationError(self.name, str(e) or type(e).__name__) from e

        tools = connection.executors()
        logger.debug(f"Provider '{self.name}' activated with tools: {sorted(tools)}")
        return ProviderTools(tools=tools, close=connection.close)

    async def close(self, provider_tools: ProviderTools) -> None:
        """Release the connection behind an activation result."""
        await provider_tools.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
