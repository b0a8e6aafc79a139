"""
MCP Tool Base Classes

Provides the parameter schema, argument validation, result envelope and
error taxonomy shared by all Open Food Facts tools.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .client import OpenFoodFactsClient


class ToolName(str, Enum):
    """Closed set of tools this server exposes, in advertised order."""
    SEARCH_PRODUCTS = "search_products"
    GET_PRODUCT_BY_BARCODE = "get_product_by_barcode"
    GET_PRODUCTS_BY_CATEGORY = "get_products_by_category"
    GET_PRODUCTS_BY_BRAND = "get_products_by_brand"
    GET_NUTRITION_FACTS = "get_nutrition_facts"
    COMPARE_PRODUCTS = "compare_products"
    GET_ALLERGEN_INFO = "get_allergen_info"
    SEARCH_BY_NUTRIMENTS = "search_by_nutriments"


# ============== Errors ==============


class ErrorCategory(str, Enum):
    UNKNOWN_TOOL = "UnknownTool"
    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    NETWORK_ERROR = "NetworkError"
    INTERNAL_ERROR = "InternalError"


class ToolError(Exception):
    """Base exception for tool errors. Subclasses fix the category."""

    category: ErrorCategory = ErrorCategory.INTERNAL_ERROR

    def __init__(self, message: str, tool_name: str = None, details: Dict = None):
        self.message = message
        self.tool_name = tool_name
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category.value, "message": self.message}


class UnknownToolError(ToolError):
    """Raised when an invocation names no registered tool."""
    category = ErrorCategory.UNKNOWN_TOOL


class InvalidArgumentError(ToolError):
    """Raised when tool input validation fails."""
    category = ErrorCategory.INVALID_ARGUMENT


class NotFoundError(ToolError):
    """Raised when the remote service reports that a product does not exist."""
    category = ErrorCategory.NOT_FOUND


class NetworkToolError(ToolError):
    """Raised when the remote service cannot be reached or answers garbage."""
    category = ErrorCategory.NETWORK_ERROR


class InternalToolError(ToolError):
    """Wraps any other failure raised while executing a tool."""
    category = ErrorCategory.INTERNAL_ERROR


# ============== Schema ==============


@dataclass(frozen=True)
class ToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: str  # JSON-Schema type: string, number, integer, array
    description: str
    required: bool = True
    default: Any = None
    enum: Optional[Sequence[str]] = None
    items_type: str = "string"
    min_items: Optional[int] = None
    max_items: Optional[int] = None

    def to_json_schema(self) -> Dict[str, Any]:
        prop: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.type == "array":
            prop["items"] = {"type": self.items_type}
            if self.min_items is not None:
                prop["minItems"] = self.min_items
            if self.max_items is not None:
                prop["maxItems"] = self.max_items
        if self.enum:
            prop["enum"] = list(self.enum)
        if self.default is not None:
            prop["default"] = self.default
        return prop


@dataclass(frozen=True)
class ToolDefinition:
    """Complete, immutable definition of an MCP tool."""
    name: str
    description: str
    parameters: Sequence[ToolParameter] = field(default_factory=tuple)
    category: str = "general"

    def input_schema(self) -> Dict[str, Any]:
        """JSON-Schema object describing the tool arguments."""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
        }
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return schema


@dataclass
class ToolResult:
    """Uniform success envelope: one or more text items."""
    content: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> "ToolResult":
        """Wrap a payload as a single pretty-printed JSON text item."""
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        return cls(content=[{"type": "text", "text": text}])

    def to_dict(self) -> Dict[str, Any]:
        return {"content": [dict(item) for item in self.content]}


# ============== Argument coercion ==============


def _coerce(param: ToolParameter, value: Any, tool_name: str) -> Any:
    def invalid(expected: str) -> InvalidArgumentError:
        return InvalidArgumentError(
            f"Parameter '{param.name}' must be {expected}, got {value!r}",
            tool_name=tool_name,
        )

    if param.type == "string":
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise invalid("a string")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        value = str(value).strip()
        if not value:
            if not param.required:
                return None
            raise InvalidArgumentError(
                f"Parameter '{param.name}' must not be empty", tool_name=tool_name
            )
        if param.enum:
            # Enum match is case-insensitive; the declared spelling wins
            for option in param.enum:
                if option.lower() == value.lower():
                    return option
            raise invalid(f"one of {', '.join(param.enum)}")
        return value

    if param.type in ("number", "integer"):
        if isinstance(value, bool):
            raise invalid(f"a {param.type}")
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            raise invalid(f"a {param.type}") from None
        if number != number or number in (float("inf"), float("-inf")):
            raise invalid(f"a finite {param.type}")
        if param.type == "integer":
            return int(number)
        return int(number) if isinstance(value, int) else number

    if param.type == "array":
        if not isinstance(value, (list, tuple)):
            raise invalid("an array")
        count = len(value)
        if param.min_items is not None and count < param.min_items:
            raise invalid(f"an array of at least {param.min_items} items")
        if param.max_items is not None and count > param.max_items:
            raise invalid(f"an array of at most {param.max_items} items")
        if param.items_type == "string":
            items = []
            for item in value:
                if isinstance(item, bool) or not isinstance(item, (str, int)):
                    raise invalid("an array of strings")
                items.append(str(item).strip())
            return items
        return list(value)

    return value


class MCPTool(ABC):
    """
    Abstract base class for MCP tools.

    All tools must inherit from this class and implement:
    - name: Tool identifier
    - description: What the tool does
    - parameters: List of ToolParameter definitions
    - execute(): The actual tool logic
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for the tool."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        pass

    @property
    def parameters(self) -> List[ToolParameter]:
        """List of parameters the tool accepts."""
        return []

    @property
    def category(self) -> str:
        """Category for grouping tools."""
        return "general"

    def validate(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Validate input parameters.
        Returns validated/normalized parameters. Optional parameters that
        were not supplied and have no default are left out entirely.
        Raises InvalidArgumentError if validation fails.
        """
        arguments = arguments or {}
        if not isinstance(arguments, dict):
            raise InvalidArgumentError("Tool arguments must be an object", tool_name=self.name)

        validated = {}
        for param in self.parameters:
            value = arguments.get(param.name)

            if value is None:
                if param.required:
                    raise InvalidArgumentError(
                        f"Missing required parameter: {param.name}",
                        tool_name=self.name
                    )
                if param.default is None:
                    continue
                value = param.default

            value = _coerce(param, value, self.name)
            if value is not None:
                validated[param.name] = value

        return validated

    @abstractmethod
    async def execute(self, client: "OpenFoodFactsClient", **kwargs) -> Any:
        """
        Execute the tool with validated parameters.
        Returns a JSON-serialisable payload.
        """
        pass

    async def run(self, client: "OpenFoodFactsClient", arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Public entry point: validate, execute and wrap the payload.
        Errors propagate to the dispatcher.
        """
        validated = self.validate(arguments)
        payload = await self.execute(client, **validated)
        return ToolResult.from_json(payload)

    def to_definition(self) -> ToolDefinition:
        """Convert tool to ToolDefinition for registry."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=tuple(self.parameters),
            category=self.category
        )

    def to_openai_schema(self) -> Dict:
        """Convert tool to OpenAI function calling schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.to_definition().input_schema(),
            }
        }
