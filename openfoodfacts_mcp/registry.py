"""
MCP Tool Registry

Single Source of Truth (SSOT) for tool discovery and dispatch.
The registry is built once from tools.TOOL_CLASSES and is read-only after.
"""

import logging
import time
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .base import (
    InternalToolError,
    MCPTool,
    ToolDefinition,
    ToolError,
    ToolName,
    ToolResult,
    UnknownToolError,
)
from .client import OpenFoodFactsClient
from .config import load_settings

logger = logging.getLogger(__name__)

# Global registry
_tool_registry: Mapping[ToolName, MCPTool] = MappingProxyType({})
_initialized: bool = False


def _build_registry() -> Mapping[ToolName, MCPTool]:
    from .tools import TOOL_CLASSES

    registry: Dict[ToolName, MCPTool] = {}
    for cls in TOOL_CLASSES:
        instance = cls()
        key = ToolName(instance.name)
        if key in registry:
            raise RuntimeError(f"Duplicate tool registered: {key.value}")
        registry[key] = instance
        logger.debug(f"Registered tool: {key.value} ({cls.__name__})")

    missing = [name.value for name in ToolName if name not in registry]
    if missing:
        raise RuntimeError(f"Tools without implementation: {', '.join(missing)}")

    return MappingProxyType(registry)


def _discover_tools() -> None:
    global _tool_registry, _initialized

    if _initialized:
        return

    _tool_registry = _build_registry()
    _initialized = True
    logger.info(f"Tool registry ready. Total tools: {len(_tool_registry)}")


def get_all_tools() -> Dict[str, ToolDefinition]:
    """
    Get all registered tools, in advertised order.
    This is the public API for accessing tools.
    """
    _discover_tools()
    return {name.value: tool.to_definition() for name, tool in _tool_registry.items()}


def get_tool(name: str) -> Optional[ToolDefinition]:
    """
    Get a specific tool by name.
    Returns None if tool not found.
    """
    tool = _resolve(name)
    return tool.to_definition() if tool else None


def list_tool_names() -> List[str]:
    """Get list of all registered tool names."""
    _discover_tools()
    return [name.value for name in _tool_registry]


def get_mcp_tools_schema() -> List[Dict[str, Any]]:
    """Get all tools as MCP descriptors (name, description, inputSchema)."""
    return [
        {
            "name": definition.name,
            "description": definition.description,
            "inputSchema": definition.input_schema(),
        }
        for definition in get_all_tools().values()
    ]


def get_openai_tools_schema() -> List[Dict]:
    """Get all tools in OpenAI function calling format."""
    _discover_tools()
    return [tool.to_openai_schema() for tool in _tool_registry.values()]


def _resolve(name: str) -> Optional[MCPTool]:
    _discover_tools()
    try:
        return _tool_registry[ToolName(name)]
    except ValueError:
        return None


async def dispatch(
    name: str,
    arguments: Optional[Dict[str, Any]] = None,
    client: Optional[OpenFoodFactsClient] = None,
) -> ToolResult:
    """
    Execute a tool by name with given arguments.

    ToolError subclasses propagate unchanged; anything else is wrapped in
    InternalToolError. When no client is given a short-lived one is built
    from the environment settings.

    Raises:
        UnknownToolError: name matches no registered tool
        ToolError: any other categorised failure
    """
    tool = _resolve(name)
    if tool is None:
        logger.warning(f"Unknown tool requested: {name}")
        raise UnknownToolError(f"Tool {name} not found", tool_name=name)

    if client is None:
        async with OpenFoodFactsClient.from_settings(load_settings()) as own_client:
            return await dispatch(name, arguments, own_client)

    started = time.perf_counter()
    try:
        result = await tool.run(client, arguments)
    except ToolError as e:
        if e.tool_name is None:
            e.tool_name = name
        logger.info(f"{name} failed [{e.category.value}] in {time.perf_counter() - started:.2f}s: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in {name}")
        raise InternalToolError(
            f"Error executing tool {name}: {e}",
            tool_name=name,
            details={"exception": type(e).__name__},
        ) from e

    logger.info(f"{name} completed in {time.perf_counter() - started:.2f}s")
    return result
