"""Tool provider adapters."""

from .base import ProviderTools, ToolProvider


def default_providers() -> list[ToolProvider]:
    """Return a new list of all supported providers, in priority order."""
    from ai_sdk_tools.context7 import Context7Provider

    return [Context7Provider()]


__all__ = ["ProviderTools", "ToolProvider", "default_providers"]
