"""
Tool calling for smart-account agents.

The registry describes tools to the LLM; the dispatcher validates a requested
call, builds its context and runs the handler. The default catalog lives in
:mod:`verbex.core.agent.catalog`.
"""

from .context import ExecutionContext, ServiceFactory, ToolContext
from .schema import ToolCall, ToolDefinition, ToolParameter, ToolParameterType
from .tools import RegisteredTool, ToolDispatcher, ToolRegistry, ToolRegistryBuilder, ToolResult

__all__ = [
    "ExecutionContext",
    "ServiceFactory",
    "ToolContext",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolParameterType",
    "RegisteredTool",
    "ToolDispatcher",
    "ToolRegistry",
    "ToolRegistryBuilder",
    "ToolResult",
]
