"""
Tool definition models exposed to LLM providers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type, Union, get_args, get_origin

from pydantic import BaseModel, Field


class ToolParameterType(str, Enum):
    """Supported parameter types for tool definitions"""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ToolParameter(BaseModel):
    """Definition of a single tool parameter"""
    name: str
    type: ToolParameterType
    description: str
    required: bool = True
    enum: Optional[List[str]] = None
    default: Optional[Any] = None
    items: Optional[Dict[str, Any]] = None

    def to_json_schema(self) -> Dict[str, Any]:
        prop: Dict[str, Any] = {
            "type": self.type.value,
            "description": self.description,
        }
        if self.enum:
            prop["enum"] = self.enum
        if self.default is not None:
            prop["default"] = self.default
        if self.items is not None:
            prop["items"] = self.items
        return prop


class ToolCall(BaseModel):
    """A tool call requested by the LLM"""
    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolDefinition(BaseModel):
    """Definition of a tool that can be called by the LLM"""
    name: str
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {param.name: param.to_json_schema() for param in self.parameters},
            "required": [param.name for param in self.parameters if param.required],
        }

    def to_anthropic_format(self) -> Dict[str, Any]:
        """Convert to Anthropic's tool schema format"""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema(),
        }

    def to_openai_format(self) -> Dict[str, Any]:
        """Convert to the OpenAI / Groq function-calling format"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema(),
            },
        }


_SCALARS = {
    str: ToolParameterType.STRING,
    bool: ToolParameterType.BOOLEAN,
    int: ToolParameterType.INTEGER,
    float: ToolParameterType.NUMBER,
}


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
        # str | int style unions are offered to the LLM as strings
        return str
    return annotation


def _item_schema(annotation: Any) -> Dict[str, Any]:
    annotation = _unwrap_optional(annotation)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        parameters = parameters_from_model(annotation)
        return {
            "type": "object",
            "properties": {param.name: param.to_json_schema() for param in parameters},
            "required": [param.name for param in parameters if param.required],
        }
    return {"type": _SCALARS.get(annotation, ToolParameterType.STRING).value}


def _describe(annotation: Any) -> tuple[ToolParameterType, Optional[List[str]], Optional[Dict[str, Any]]]:
    annotation = _unwrap_optional(annotation)
    origin = get_origin(annotation)
    if origin is Literal:
        return ToolParameterType.STRING, [str(value) for value in get_args(annotation)], None
    if origin in (list, List):
        (item,) = get_args(annotation) or (str,)
        return ToolParameterType.ARRAY, None, _item_schema(item)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return ToolParameterType.OBJECT, None, None
    return _SCALARS.get(annotation, ToolParameterType.STRING), None, None


def parameters_from_model(model: Type[BaseModel]) -> List[ToolParameter]:
    """Derive LLM-facing parameters from an arguments model (aliases become names)."""
    parameters: List[ToolParameter] = []
    for field_name, info in model.model_fields.items():
        if field_name == "tool":
            continue
        param_type, enum, items = _describe(info.annotation)
        required = info.is_required()
        default = None if required or info.default_factory is not None else info.default
        parameters.append(
            ToolParameter(
                name=info.alias or field_name,
                type=param_type,
                description=info.description or "",
                required=required,
                enum=enum,
                default=default,
                items=items,
            )
        )
    return parameters


def definition_from_model(name: str, description: str, model: Type[BaseModel]) -> ToolDefinition:
    return ToolDefinition(name=name, description=description, parameters=parameters_from_model(model))
