"""MCP (Model Context Protocol) client integration.

Connects to a single MCP server over stdio or streamable HTTP and exposes its
tools as invocable executors. Provider adapters build the server
configuration; the tools manager owns the resulting connections.

Example server configurations:
    MCPServerConfig(
        name="filesystem",
        transport="stdio",
        command=["npx", "-y", "@modelcontextprotocol/server-filesystem", "/tmp"],
    )
    MCPServerConfig(
        name="my-http-server",
        transport="streamable-http",
        url="http://localhost:8000/mcp",
        headers={"Authorization": "Bearer ..."},
    )
"""

from ai_sdk_tools.mcp_client.client import (
    MCPConnection,
    MCPServerConfig,
    MCPTool,
    MCPToolExecutor,
)

__all__ = ["MCPConnection", "MCPServerConfig", "MCPTool", "MCPToolExecutor"]
