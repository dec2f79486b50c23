"""
Tool Registry and Dispatcher for LLM-driven tool calling.

The registry is built once and is read-only afterwards. The dispatcher
resolves a tool name, validates the context and arguments, runs the handler
and turns any failure into the tool's ``"<prefix>: <reason>"`` message.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Coroutine, Dict, Iterator, List, Mapping, Optional, Type, Union

from pydantic import BaseModel
from structlog.contextvars import bound_contextvars

from ..errors import DuplicateToolError, UnknownToolError, VerbexError
from .arguments import ToolArgs, validate_arguments
from .context import ExecutionContext, ServiceFactory, ToolContext
from .schema import ToolCall, ToolDefinition, definition_from_model

ToolHandler = Callable[[Any, Optional[ToolContext]], Coroutine[Any, Any, str]]


@dataclass(frozen=True)
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    arguments_model: Type[ToolArgs]
    handler: ToolHandler
    requires_context: bool = True
    error_prefix: str = "Error"

    @property
    def name(self) -> str:
        return self.definition.name


class ToolRegistry(Mapping[str, RegisteredTool]):
    """
    Read-only registry of available tools that the LLM can call.

    Build one with :class:`ToolRegistryBuilder`.
    """

    def __init__(self, tools: Mapping[str, RegisteredTool]):
        self._tools = MappingProxyType(dict(tools))

    def __getitem__(self, name: str) -> RegisteredTool:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        """Get a registered tool by name."""
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def require(self, name: str) -> RegisteredTool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def get_definitions(self) -> List[ToolDefinition]:
        """Get all tool definitions for passing to the LLM."""
        return [tool.definition for tool in self._tools.values()]

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        return [definition.to_openai_format() for definition in self.get_definitions()]

    def to_anthropic_tools(self) -> List[Dict[str, Any]]:
        return [definition.to_anthropic_format() for definition in self.get_definitions()]


class ToolRegistryBuilder:
    """Collects tool registrations; names must be unique."""

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}

    def add(self, tool: RegisteredTool) -> "ToolRegistryBuilder":
        if tool.name in self._tools:
            raise DuplicateToolError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        return self

    def register(
        self,
        name: str,
        description: str,
        arguments_model: Type[ToolArgs],
        handler: ToolHandler,
        *,
        requires_context: bool = True,
        error_prefix: str = "Error",
    ) -> "ToolRegistryBuilder":
        """Register a tool with its description, argument model and handler."""
        return self.add(
            RegisteredTool(
                definition=definition_from_model(name, description, arguments_model),
                arguments_model=arguments_model,
                handler=handler,
                requires_context=requires_context,
                error_prefix=error_prefix,
            )
        )

    def build(self) -> ToolRegistry:
        return ToolRegistry(self._tools)


class ToolResult(BaseModel):
    """Result of executing a tool"""
    tool_name: str
    result: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    tool_call_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str:
        return self.error if self.error is not None else (self.result or "")

    def to_anthropic_format(self) -> Dict[str, Any]:
        """Convert to Anthropic's tool_result format"""
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_call_id,
            "content": self.render(),
            "is_error": self.error is not None,
        }


ContextLike = Union[ExecutionContext, Mapping[str, Any], None]


class ToolDispatcher:
    """
    Executes tool calls requested by the LLM.

    ``dispatch`` returns a string for every outcome except an invalid execution
    context, which raises :class:`~verbex.core.errors.InvalidContextError`.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        services: Optional[ServiceFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.services = services or ServiceFactory()
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _coerce_context(context: ContextLike) -> ExecutionContext:
        if isinstance(context, ExecutionContext):
            return context
        return ExecutionContext.from_mapping(context or {})

    async def dispatch(self, name: str, args: Optional[Mapping[str, Any]], context: ContextLike = None) -> str:
        result = await self.execute(name, args, context)
        return result.render()

    async def execute(
        self,
        name: str,
        args: Optional[Mapping[str, Any]],
        context: ContextLike = None,
        tool_call_id: Optional[str] = None,
    ) -> ToolResult:
        """Execute a single tool call and return the typed result."""
        tool = self.registry.get_tool(name)
        if tool is None:
            self.logger.warning(f"Unknown tool requested: {name}")
            return ToolResult(
                tool_name=name,
                error=f"Error: {UnknownToolError(name)}",
                error_kind=UnknownToolError.kind,
                tool_call_id=tool_call_id,
            )

        execution = self._coerce_context(context)
        with bound_contextvars(tool=name, network=execution.network):
            tool_context: Optional[ToolContext] = None
            if tool.requires_context:
                chain = execution.validate()
                tool_context = self.services.tool_context(execution, chain)

            started = time.perf_counter()
            try:
                arguments = validate_arguments(tool.arguments_model, dict(args or {}))
                output = await tool.handler(arguments, tool_context)
                result = ToolResult(tool_name=name, result=output, tool_call_id=tool_call_id)
            except VerbexError as exc:
                result = ToolResult(
                    tool_name=name,
                    error=f"{tool.error_prefix}: {exc}",
                    error_kind=exc.kind,
                    tool_call_id=tool_call_id,
                )
            except Exception as exc:
                self.logger.exception(f"Tool execution error for {name}: {exc}")
                result = ToolResult(
                    tool_name=name,
                    error=f"{tool.error_prefix}: {exc}",
                    error_kind=VerbexError.kind,
                    tool_call_id=tool_call_id,
                )

            duration_ms = (time.perf_counter() - started) * 1000
            if result.ok:
                self.logger.info(f"Tool {name} succeeded in {duration_ms:.0f}ms")
            else:
                self.logger.warning(f"Tool {name} failed in {duration_ms:.0f}ms ({result.error_kind}): {result.error}")
            return result

    async def execute_parallel(self, tool_calls: List[ToolCall], context: ContextLike = None) -> List[ToolResult]:
        """Execute multiple tool calls in parallel."""
        if not tool_calls:
            return []

        tasks = [self.execute(call.name, call.arguments, context, tool_call_id=call.id) for call in tool_calls]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        final_results = []
        for call, result in zip(tool_calls, results):
            if isinstance(result, VerbexError):
                final_results.append(ToolResult(
                    tool_name=call.name,
                    error=f"Error: {result}",
                    error_kind=result.kind,
                    tool_call_id=call.id,
                ))
            elif isinstance(result, BaseException):
                raise result
            else:
                final_results.append(result)

        return final_results
