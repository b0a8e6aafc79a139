#!/usr/bin/env python3
"""
HTTP API Server

Exposes the registered Open Food Facts tools over HTTP for hosts that
cannot speak MCP on stdio.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from . import __version__
from .base import ToolError
from .client import OpenFoodFactsClient
from .config import Settings, load_settings
from .registry import (
    dispatch,
    get_all_tools,
    get_openai_tools_schema,
    get_tool,
    list_tool_names,
)

logger = logging.getLogger(__name__)


class ToolRequest(BaseModel):
    """Request body for tool execution."""

    arguments: Dict[str, Any] = {}


class ToolResponse(BaseModel):
    """Response from tool execution."""

    success: bool
    tool: str
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


def _describe(definition, include_default: bool = False) -> Dict[str, Any]:
    params = []
    for p in definition.parameters:
        entry = {
            "name": p.name,
            "type": p.type,
            "description": p.description,
            "required": p.required,
        }
        if include_default:
            entry["default"] = p.default
        if p.enum:
            entry["enum"] = list(p.enum)
        params.append(entry)
    return {
        "name": definition.name,
        "description": definition.description,
        "category": definition.category,
        "parameters": params,
    }


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        transport: httpx transport override for the remote client (tests)
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        tools = get_all_tools()
        logger.info(f"OpenFoodFacts server starting with {len(tools)} tools against {settings.base_url}")
        for name in tools:
            logger.info(f"  - {name}")

        app.state.client = OpenFoodFactsClient.from_settings(settings, transport=transport)
        try:
            yield
        finally:
            await app.state.client.aclose()
            logger.info("OpenFoodFacts server shutting down")

    app = FastAPI(
        title="OpenFoodFacts MCP Server",
        description="Open Food Facts product tools for agents",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============== API Endpoints ==============

    @app.get("/")
    async def root():
        return {
            "service": "OpenFoodFacts MCP Server",
            "version": __version__,
            "tools_count": len(list_tool_names()),
            "endpoints": {
                "list_tools": "/tools",
                "tool_schema": "/tools/schema",
                "execute": "/tools/{tool_name}/execute",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "tools_loaded": len(list_tool_names())}

    @app.get("/tools")
    async def list_tools():
        tools = get_all_tools()
        return {
            "total": len(tools),
            "tools": [_describe(tool) for tool in tools.values()],
        }

    @app.get("/tools/schema")
    async def get_tools_schema():
        return {"tools": get_openai_tools_schema()}

    @app.get("/tools/{tool_name}")
    async def get_tool_info(tool_name: str):
        definition = get_tool(tool_name)
        if definition is None:
            raise HTTPException(status_code=404, detail=f"Tool not found: {tool_name}")
        return _describe(definition, include_default=True)

    @app.post("/tools/{tool_name}/execute", response_model=ToolResponse)
    async def execute_tool_endpoint(tool_name: str, request: ToolRequest, http_request: Request):
        try:
            result = await dispatch(tool_name, request.arguments, http_request.app.state.client)
        except ToolError as e:
            return ToolResponse(
                success=False,
                tool=tool_name,
                error=e.message,
                error_type=e.category.value,
            )
        return ToolResponse(success=True, tool=tool_name, result=result.to_dict())

    return app


app = create_app()


def main(settings: Optional[Settings] = None):
    """Run the HTTP API server."""
    import uvicorn

    settings = settings or load_settings()
    logger.info(f"Starting HTTP server on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
