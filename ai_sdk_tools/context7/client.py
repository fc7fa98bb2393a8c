"""Context7 documentation lookup provider.

Context7 provides up-to-date documentation and code examples for libraries
and frameworks, helping models give accurate answers about current APIs.

Example:
    from ai_sdk_tools.context7 import create_context7_tools

    result = await create_context7_tools()
    try:
        answer = await completion_client.generate_text(
            "How do I use the latest React Query API?", tools=result.tools
        )
    finally:
        await result.close()
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ai_sdk_tools.errors import MissingConfigError
from ai_sdk_tools.mcp_client import MCPServerConfig
from ai_sdk_tools.providers.base import ToolProvider

from .types import CONTEXT7_PACKAGE, Context7Config, Context7ToolsOptions, Context7ToolsResult

logger = logging.getLogger(__name__)

CONTEXT7_ENV_VAR = "CONTEXT7_API_KEY"


class Context7ApiKeyError(MissingConfigError):
    """Raised when the Context7 API key is not configured."""

    def __init__(self):
        super().__init__(
            provider="context7",
            key="api_key",
            env_var=CONTEXT7_ENV_VAR,
            message=(
                "Context7 API key is required. Set CONTEXT7_API_KEY environment "
                "variable or pass api_key in config."
            ),
        )


class Context7Provider(ToolProvider):
    """Provider adapter for the Context7 MCP server."""

    name = "context7"
    env_var = CONTEXT7_ENV_VAR

    def resolve_config(
        self, settings: Context7Config | Mapping[str, Any] | None = None
    ) -> Context7Config:
        if isinstance(settings, Context7Config):
            config = settings
        else:
            config = Context7Config.from_settings(settings)

        api_key = config.api_key or os.environ.get(self.env_var)
        if not api_key:
            raise Context7ApiKeyError()
        return replace(config, api_key=api_key)

    def server_config(self, config: Context7Config) -> MCPServerConfig:
        if config.transport == "stdio":
            return MCPServerConfig(
                name=self.name,
                transport="stdio",
                command="npx",
                args=["-y", CONTEXT7_PACKAGE, "--api-key", config.api_key],
            )
        return MCPServerConfig(
            name=self.name,
            transport="streamable-http",
            url=config.url,
            headers={CONTEXT7_ENV_VAR: config.api_key},
        )


async def create_context7_tools(
    options: Context7ToolsOptions | None = None,
) -> Context7ToolsResult:
    """Create a Context7 MCP client and return its tools.

    The caller owns the connection and must await ``result.close()`` when done.

    Raises:
        Context7ApiKeyError: If no API key is configured.
        ActivationError: If the Context7 server cannot be reached.
    """
    options = options or Context7ToolsOptions()
    provider = Context7Provider()
    try:
        result = await provider.activate(options.config)
    except Exception as e:
        if options.on_error is not None:
            options.on_error(e)
        raise

    if options.on_ready is not None:
        options.on_ready()
    return result


def is_context7_available(config: Context7Config | Mapping[str, Any] | None = None) -> bool:
    """Check if Context7 is available (API key is configured)."""
    return Context7Provider().is_available(config)
