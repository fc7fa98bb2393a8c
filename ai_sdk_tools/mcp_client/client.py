"""MCP client connection to a single MCP server.

This module provides the MCPConnection class, which opens a session to one
MCP server over stdio or streamable HTTP, discovers its tools and proxies
tool calls to it.
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any

import httpx
from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamable_http_client

logger = logging.getLogger(__name__)


@dataclass
class MCPServerConfig:
    """Configuration for an MCP server connection."""

    name: str
    transport: str  # "stdio" or "streamable-http"
    command: list[str] | str | None = None  # For stdio transport
    args: list[str] | None = None  # Arguments for command (alternative to embedding in command)
    cwd: str | None = None  # Working directory for stdio transport
    url: str | None = None  # For HTTP transport
    env: dict[str, str] = field(default_factory=dict)  # Environment variables for stdio
    headers: dict[str, str] = field(default_factory=dict)  # HTTP headers for HTTP transport


@dataclass
class MCPTool:
    """A tool discovered from an MCP server."""

    server_name: str
    name: str
    description: str
    input_schema: dict


class MCPToolExecutor:
    """Invocable tool descriptor backed by an MCP server.

    Instances are the values of the tool mappings handed to the completion
    workflow: ``definition`` describes the tool to the model and ``execute``
    runs it on the server that published it.
    """

    def __init__(self, connection: "MCPConnection", tool: MCPTool):
        self.connection = connection
        self.tool = tool

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def server_name(self) -> str:
        return self.tool.server_name

    @property
    def definition(self) -> dict[str, Any]:
        """Tool definition in the name/description/input_schema format."""
        return {
            "name": self.tool.name,
            "description": self.tool.description,
            "input_schema": self.tool.input_schema or {"type": "object", "properties": {}},
        }

    async def execute(self, **kwargs: Any) -> str | list[dict]:
        """Execute the MCP tool with given arguments."""
        return await self.connection.call_tool(self.tool.name, kwargs)

    def __repr__(self) -> str:
        return f"MCPToolExecutor(server={self.server_name!r}, tool={self.name!r})"


class MCPConnection:
    """A live connection to one MCP server.

    The transport and session contexts are entered and exited by a single
    owner task started in connect(); close() asks that task to leave them.
    Connections opened from different tasks can therefore be closed from any
    task, concurrently.

    Usage:
        connection = MCPConnection(config)
        tools = await connection.connect()
        executors = connection.executors()
        ...
        await connection.close()
    """

    def __init__(self, config: MCPServerConfig):
        self.config = config
        self._session: ClientSession | None = None
        self._tools: list[MCPTool] = []
        self._task: asyncio.Task | None = None
        self._closing: asyncio.Event | None = None

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def connected(self) -> bool:
        return self._session is not None

    @property
    def tools(self) -> list[MCPTool]:
        return list(self._tools)

    async def connect(self) -> list[MCPTool]:
        """Connect to the server and discover its tools.

        Raises whatever the transport or the session raised while connecting.
        If the caller is cancelled while waiting, the owner task is cancelled
        and awaited before the cancellation propagates.
        """
        if self._task is not None:
            raise RuntimeError(f"MCP server '{self.name}' is already connected")

        ready: asyncio.Future[list[MCPTool]] = asyncio.get_running_loop().create_future()
        self._closing = asyncio.Event()
        self._task = asyncio.create_task(self._run(ready), name=f"mcp-{self.name}")
        try:
            return await asyncio.shield(ready)
        except BaseException:
            await self._abort()
            raise

    async def _run(self, ready: "asyncio.Future[list[MCPTool]]") -> None:
        """Owner task: hold the session open until close() is requested."""
        try:
            async with AsyncExitStack() as stack:
                read, write = await self._enter_transport(stack)
                session = await stack.enter_async_context(ClientSession(read, write))
                await session.initialize()

                tools_response = await session.list_tools()
                self._tools = [
                    MCPTool(
                        server_name=self.name,
                        name=tool.name,
                        description=tool.description or "",
                        input_schema=tool.inputSchema or {},
                    )
                    for tool in tools_response.tools
                ]
                self._session = session
                logger.info(
                    f"Connected to MCP server '{self.name}' ({self.config.transport}): "
                    f"{len(self._tools)} tools"
                )
                ready.set_result(list(self._tools))

                await self._closing.wait()
        except Exception as e:
            if not ready.done():
                ready.set_exception(e)
                return
            raise
        except BaseException as e:
            # connect() must never wait on a task that already died
            if not ready.done():
                if isinstance(e, asyncio.CancelledError):
                    ready.cancel()
                else:
                    ready.set_exception(e)
            raise
        finally:
            self._session = None

    async def _enter_transport(self, stack: AsyncExitStack) -> tuple[Any, Any]:
        """Open the configured transport and return its (read, write) streams."""
        cfg = self.config

        if cfg.transport == "stdio":
            if not cfg.command:
                raise ValueError(f"MCP server '{cfg.name}': stdio transport requires 'command'")

            # Support both styles:
            # 1. command: ["python", "-m", "module"] (args embedded in command)
            # 2. command: "python", args: ["-m", "module"] (separate args)
            if isinstance(cfg.command, list):
                command = cfg.command[0]
                args = cfg.command[1:] + (cfg.args or [])
            else:
                command = cfg.command
                args = cfg.args or []

            server_params = StdioServerParameters(
                command=command,
                args=args,
                env=cfg.env if cfg.env else None,
                cwd=cfg.cwd,
            )
            read, write = await stack.enter_async_context(stdio_client(server_params))
            return read, write

        if cfg.transport in ("streamable-http", "http"):
            if not cfg.url:
                raise ValueError(f"MCP server '{cfg.name}': HTTP transport requires 'url'")

            http_client = None
            if cfg.headers:
                http_client = await stack.enter_async_context(
                    httpx.AsyncClient(headers=cfg.headers)
                )
            read, write, _ = await stack.enter_async_context(
                streamable_http_client(cfg.url, http_client=http_client)
            )
            return read, write

        raise ValueError(f"MCP server '{cfg.name}': unknown transport '{cfg.transport}'")

    async def _abort(self) -> None:
        """Tear down a connection whose connect() did not complete."""
        task, self._task = self._task, None
        self._session = None
        self._tools = []
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"MCP server '{self.name}' teardown after failed connect: {e}")

    def executors(self) -> dict[str, MCPToolExecutor]:
        """Get executor instances for all tools of this server, keyed by tool name."""
        return {tool.name: MCPToolExecutor(self, tool) for tool in self._tools}

    async def call_tool(self, tool_name: str, arguments: dict) -> str | list[dict]:
        """Call a tool on the MCP server.

        Args:
            tool_name: Name of the tool to call.
            arguments: Tool arguments as a dict.

        Returns:
            Tool result as a string or list of content blocks.
        """
        session = self._session
        if not session:
            raise ValueError(f"MCP server '{self.name}' not connected")

        try:
            result = await session.call_tool(tool_name, arguments)
            return self._format_result(result)
        except Exception as e:
            logger.error(f"MCP tool call failed ({self.name}:{tool_name}): {e}")
            raise

    def _format_result(self, result: Any) -> str | list[dict]:
        """Format an MCP CallToolResult.

        Text-only results become a single string; images and mixed content
        become a list of content blocks.
        """
        if not hasattr(result, "content"):
            return str(result)

        blocks = []
        text_parts = []

        for item in result.content:
            if isinstance(item, types.TextContent):
                text_parts.append(item.text)
            elif isinstance(item, types.ImageContent):
                blocks.append(
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": item.mimeType,
                            "data": item.data,
                        },
                    }
                )
            elif isinstance(item, types.EmbeddedResource):
                resource = item.resource
                if hasattr(resource, "text"):
                    text_parts.append(f"[Resource: {resource.uri}]\n{resource.text}")
                else:
                    text_parts.append(f"[Resource: {resource.uri}] (binary data)")

        if text_parts and not blocks:
            return "\n".join(text_parts)

        if text_parts:
            blocks.insert(0, {"type": "text", "text": "\n".join(text_parts)})

        return blocks if blocks else "Tool executed successfully with no output."

    async def close(self) -> None:
        """Close the session and the transport.

        Errors raised while tearing down propagate to the caller. Closing a
        connection that is not open is a no-op.
        """
        task, self._task = self._task, None
        if task is None:
            return
        self._closing.set()
        try:
            await task
        finally:
            self._tools = []
        logger.debug(f"Disconnected from MCP server '{self.name}'")

    async def __aenter__(self) -> "MCPConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
