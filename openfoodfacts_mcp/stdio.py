"""
MCP stdio transport

Serves the tool registry over the Model Context Protocol on stdin/stdout.
Logging goes to stderr: stdout carries the protocol stream.
"""

import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .base import ErrorCategory, ToolError
from .client import OpenFoodFactsClient
from .config import Settings
from .registry import dispatch, get_mcp_tools_schema

logger = logging.getLogger(__name__)

SERVER_NAME = "openfoodfacts-server"
SERVER_VERSION = "1.0.0"

ERROR_CODES = {
    ErrorCategory.UNKNOWN_TOOL: types.METHOD_NOT_FOUND,
    ErrorCategory.INVALID_ARGUMENT: types.INVALID_PARAMS,
    ErrorCategory.NOT_FOUND: types.INVALID_PARAMS,
    ErrorCategory.NETWORK_ERROR: types.INTERNAL_ERROR,
    ErrorCategory.INTERNAL_ERROR: types.INTERNAL_ERROR,
}


def to_mcp_error(error: ToolError) -> McpError:
    """Translate a categorised tool error into a JSON-RPC error."""
    return McpError(
        types.ErrorData(
            code=ERROR_CODES[error.category],
            message=f"{error.category.value}: {error.message}",
            data=error.to_dict(),
        )
    )


def list_mcp_tools() -> List[types.Tool]:
    return [types.Tool(**descriptor) for descriptor in get_mcp_tools_schema()]


async def call_mcp_tool(
    client: OpenFoodFactsClient,
    name: str,
    arguments: Optional[Dict[str, Any]],
) -> List[types.TextContent]:
    try:
        result = await dispatch(name, arguments or {}, client)
    except ToolError as e:
        raise to_mcp_error(e) from e
    return [types.TextContent(type="text", text=item["text"]) for item in result.content]


def build_server(client: OpenFoodFactsClient) -> Server:
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return list_mcp_tools()

    # Registered directly: the call_tool decorator would turn McpError into an
    # isError result and drop the JSON-RPC error code
    async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        logger.info(f"call_tool {req.params.name}")
        content = await call_mcp_tool(client, req.params.name, req.params.arguments)
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    server.request_handlers[types.CallToolRequest] = handle_call_tool

    return server


async def run_stdio(settings: Settings) -> None:
    """Run the MCP server on stdio until the host closes the stream."""
    async with OpenFoodFactsClient.from_settings(settings) as client:
        server = build_server(client)
        logger.info(f"OpenFoodFacts MCP server running on stdio ({settings.base_url})")
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
