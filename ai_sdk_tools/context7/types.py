"""Configuration and result types for the Context7 provider."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ai_sdk_tools.providers.base import ProviderTools

CONTEXT7_PACKAGE = "@upstash/context7-mcp"
CONTEXT7_MCP_URL = "https://mcp.context7.com/mcp"

TRANSPORTS = ("stdio", "http", "streamable-http")


@dataclass
class Context7Config:
    """Configuration options for the Context7 MCP client.

    api_key: The Context7 API key. If not provided, CONTEXT7_API_KEY is read
        from the environment.
    transport: "stdio" launches the Context7 MCP server locally through npx;
        "http" connects to the hosted server at ``url``.
    """

    api_key: str | None = None
    transport: str = "stdio"
    url: str = CONTEXT7_MCP_URL

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None) -> "Context7Config":
        """Build a config from a settings mapping (``api_key`` or ``apiKey``)."""
        if not settings:
            return cls()

        unknown = set(settings) - {"api_key", "apiKey", "transport", "url"}
        if unknown:
            raise ValueError(f"Unknown Context7 settings: {sorted(unknown)}")

        transport = settings.get("transport", "stdio")
        if transport not in TRANSPORTS:
            raise ValueError(f"Context7: unknown transport '{transport}'")

        return cls(
            api_key=settings.get("api_key") or settings.get("apiKey"),
            transport=transport,
            url=settings.get("url", CONTEXT7_MCP_URL),
        )


@dataclass
class Context7ToolsOptions:
    """Options for creating Context7 tools."""

    config: Context7Config | Mapping[str, Any] | None = None
    # Called once the client is connected and its tools are listed
    on_ready: Callable[[], None] | None = None
    # Called with the error before it propagates
    on_error: Callable[[Exception], None] | None = None


# Tools mapping to pass to the completion workflow, and the close handle
Context7ToolsResult = ProviderTools
