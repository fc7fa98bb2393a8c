"""Tests for the Context7 provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ai_sdk_tools.context7 import (
    Context7ApiKeyError,
    Context7Config,
    Context7Provider,
    Context7ToolsOptions,
    create_context7_tools,
    is_context7_available,
)
from ai_sdk_tools.errors import ActivationError, MissingConfigError
from ai_sdk_tools.mcp_client import MCPTool


@pytest.fixture
def no_env_key(monkeypatch):
    monkeypatch.delenv("CONTEXT7_API_KEY", raising=False)


@pytest.fixture
def env_key(monkeypatch):
    monkeypatch.setenv("CONTEXT7_API_KEY", "env-key")


def mock_connection(tools=None, connect_error=None):
    """Build an MCPConnection stand-in."""
    connection = MagicMock()
    connection.connect = AsyncMock(return_value=tools or [], side_effect=connect_error)
    connection.close = AsyncMock()
    connection.executors.return_value = {tool.name: MagicMock(tool=tool) for tool in tools or []}
    return connection


class TestResolveConfig:
    """Tests for API key resolution."""

    def test_explicit_key_wins(self, env_key):
        """Test that an explicit key overrides the environment."""
        config = Context7Provider().resolve_config({"api_key": "explicit"})
        assert config.api_key == "explicit"

    def test_camel_case_key(self, no_env_key):
        """Test that apiKey is accepted as well as api_key."""
        config = Context7Provider().resolve_config({"apiKey": "camel"})
        assert config.api_key == "camel"

    def test_environment_fallback(self, env_key):
        """Test falling back to CONTEXT7_API_KEY."""
        assert Context7Provider().resolve_config().api_key == "env-key"
        assert Context7Provider().resolve_config({}).api_key == "env-key"

    def test_config_object(self, no_env_key):
        """Test resolving from a Context7Config instance."""
        config = Context7Provider().resolve_config(Context7Config(api_key="obj"))
        assert config.api_key == "obj"
        assert config.transport == "stdio"

    def test_missing_key(self, no_env_key):
        """Test that a missing key raises a MissingConfigError naming the key."""
        with pytest.raises(Context7ApiKeyError) as exc_info:
            Context7Provider().resolve_config()

        error = exc_info.value
        assert isinstance(error, MissingConfigError)
        assert error.key == "api_key"
        assert error.env_var == "CONTEXT7_API_KEY"
        assert "CONTEXT7_API_KEY" in str(error)

    def test_unknown_setting(self, env_key):
        """Test that unknown settings are rejected."""
        with pytest.raises(ValueError, match="Unknown Context7 settings"):
            Context7Provider().resolve_config({"api_kye": "typo"})

    def test_unknown_transport(self, env_key):
        """Test that an unknown transport is rejected."""
        with pytest.raises(ValueError, match="unknown transport"):
            Context7Provider().resolve_config({"transport": "smtp"})


class TestAvailability:
    """Tests for is_available / is_context7_available."""

    def test_available_from_env(self, env_key):
        assert is_context7_available()
        assert Context7Provider().is_available()

    def test_unavailable_without_key(self, no_env_key):
        assert not is_context7_available()

    def test_available_with_explicit_key(self, no_env_key):
        assert is_context7_available({"api_key": "x"})
        assert is_context7_available(Context7Config(api_key="x"))

    def test_invalid_settings_are_unavailable(self, env_key):
        """Test that is_available never raises."""
        assert not is_context7_available({"transport": "smtp"})


class TestServerConfig:
    """Tests for the MCP server configuration."""

    def test_stdio(self):
        """Test the npx launch command."""
        provider = Context7Provider()
        server = provider.server_config(Context7Config(api_key="k"))
        assert server.name == "context7"
        assert server.transport == "stdio"
        assert server.command == "npx"
        assert server.args == ["-y", "@upstash/context7-mcp", "--api-key", "k"]

    def test_http(self):
        """Test the hosted server configuration."""
        provider = Context7Provider()
        server = provider.server_config(Context7Config(api_key="k", transport="http"))
        assert server.transport == "streamable-http"
        assert server.url == "https://mcp.context7.com/mcp"
        assert server.headers == {"CONTEXT7_API_KEY": "k"}


class TestActivate:
    """Tests for activation."""

    @pytest.mark.asyncio
    async def test_activate_returns_tools_and_close(self, no_env_key):
        """Test that activate connects and returns the tools mapping."""
        tools = [MCPTool("context7", "resolve-library-id", "", {})]
        connection = mock_connection(tools)

        with patch(
            "ai_sdk_tools.providers.base.MCPConnection", return_value=connection
        ) as MockConnection:
            provider = Context7Provider()
            result = await provider.activate({"api_key": "k"})

        server = MockConnection.call_args.args[0]
        assert server.args[-1] == "k"
        connection.connect.assert_awaited_once()
        assert set(result.tools) == {"resolve-library-id"}

        await provider.close(result)
        connection.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_activate_missing_key(self, no_env_key):
        """Test that activation without a key never connects."""
        with patch("ai_sdk_tools.providers.base.MCPConnection") as MockConnection:
            with pytest.raises(Context7ApiKeyError):
                await Context7Provider().activate()
        MockConnection.assert_not_called()

    @pytest.mark.asyncio
    async def test_activate_connection_failure(self, env_key):
        """Test that connection failures become ActivationError."""
        connection = mock_connection(connect_error=OSError("npx not found"))
        with patch("ai_sdk_tools.providers.base.MCPConnection", return_value=connection):
            with pytest.raises(ActivationError) as exc_info:
                await Context7Provider().activate()

        assert exc_info.value.provider == "context7"
        assert "npx not found" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)


class TestCreateContext7Tools:
    """Tests for create_context7_tools."""

    @pytest.mark.asyncio
    async def test_on_ready_called(self, env_key):
        """Test that on_ready fires after connecting."""
        connection = mock_connection([MCPTool("context7", "get-library-docs", "", {})])
        on_ready = MagicMock()
        on_error = MagicMock()

        with patch("ai_sdk_tools.providers.base.MCPConnection", return_value=connection):
            result = await create_context7_tools(
                Context7ToolsOptions(on_ready=on_ready, on_error=on_error)
            )

        on_ready.assert_called_once_with()
        on_error.assert_not_called()
        assert "get-library-docs" in result.tools

        await result.close()
        connection.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_on_error_called(self, no_env_key):
        """Test that on_error receives the error before it propagates."""
        on_ready = MagicMock()
        on_error = MagicMock()

        with pytest.raises(Context7ApiKeyError):
            await create_context7_tools(Context7ToolsOptions(on_ready=on_ready, on_error=on_error))

        on_ready.assert_not_called()
        assert isinstance(on_error.call_args.args[0], Context7ApiKeyError)
