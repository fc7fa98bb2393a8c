from .client import (
    CONTEXT7_ENV_VAR,
    Context7ApiKeyError,
    Context7Provider,
    create_context7_tools,
    is_context7_available,
)
from .types import Context7Config, Context7ToolsOptions, Context7ToolsResult

__all__ = [
    "CONTEXT7_ENV_VAR",
    "Context7ApiKeyError",
    "Context7Config",
    "Context7Provider",
    "Context7ToolsOptions",
    "Context7ToolsResult",
    "create_context7_tools",
    "is_context7_available",
]
