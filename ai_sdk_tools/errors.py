"""Exceptions raised by the MCP tools package."""


class MCPToolsError(Exception):
    """Base class for all errors raised by ai_sdk_tools."""


class MissingConfigError(MCPToolsError):
    """A provider has no usable configuration value.

    Raised when a required key was neither passed explicitly nor found in the
    provider's environment variable.
    """

    def __init__(self, provider: str, key: str, env_var: str, message: str | None = None):
        self.provider = provider
        self.key = key
        self.env_var = env_var
        super().__init__(
            message
            or f"{provider}: '{key}' is required. Set {env_var} environment variable "
            f"or pass {key} in config."
        )


class ActivationError(MCPToolsError):
    """Connecting to a provider or listing its tools failed."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"Failed to activate MCP provider '{provider}': {reason}")


class CloseError(MCPToolsError):
    """One or more provider connections failed to close."""

    def __init__(self, failures: dict[str, BaseException]):
        self.failures = failures
        details = "; ".join(f"{name}: {error!r}" for name, error in failures.items())
        super().__init__(f"Failed to close {len(failures)} MCP provider(s): {details}")


class ToolsAlreadyClosedError(MCPToolsError, RuntimeError):
    """close() was called more than once on the same result."""
