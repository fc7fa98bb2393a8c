"""ai-sdk-tools - MCP tool providers for LLM completion workflows.

Use the tools manager to auto-detect and combine all available MCP tools:

    from ai_sdk_tools import create_mcp_tools

Or use a single provider directly:

    from ai_sdk_tools.context7 import create_context7_tools
"""

from .config import MCPToolsManagerConfig, ProviderMode, ProviderSetting
from .context7 import (
    Context7ApiKeyError,
    Context7Config,
    Context7Provider,
    Context7ToolsOptions,
    Context7ToolsResult,
    create_context7_tools,
    is_context7_available,
)
from .errors import (
    ActivationError,
    CloseError,
    MCPToolsError,
    MissingConfigError,
    ToolsAlreadyClosedError,
)
from .manager import MCPToolsManager, MCPToolsResult, create_mcp_tools, get_available_mcp_tools

__all__ = [
    "ActivationError",
    "CloseError",
    "Context7ApiKeyError",
    "Context7Config",
    "Context7Provider",
    "Context7ToolsOptions",
    "Context7ToolsResult",
    "MCPToolsError",
    "MCPToolsManager",
    "MCPToolsManagerConfig",
    "MCPToolsResult",
    "MissingConfigError",
    "ProviderMode",
    "ProviderSetting",
    "ToolsAlreadyClosedError",
    "create_context7_tools",
    "create_mcp_tools",
    "get_available_mcp_tools",
    "is_context7_available",
]
