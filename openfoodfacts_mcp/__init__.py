"""
OpenFoodFacts MCP

Exposes the Open Food Facts product database as MCP tools: search, barcode
lookup, category/brand listings, nutrition facts, allergens, comparison
and nutrient-threshold search.
"""

__version__ = "1.0.0"

from .base import ErrorCategory, MCPTool, ToolError, ToolName, ToolResult
from .client import OpenFoodFactsClient
from .registry import dispatch, get_all_tools, get_tool

__all__ = [
    "ErrorCategory",
    "MCPTool",
    "OpenFoodFactsClient",
    "ToolError",
    "ToolName",
    "ToolResult",
    "dispatch",
    "get_all_tools",
    "get_tool",
]
