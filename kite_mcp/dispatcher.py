"""
MCP dispatcher – routes JSON-RPC `tools/list` and `tools/call` requests.

Lookup order for `tools/call`:
    1. exact match in the local tool registry
    2. a GitHub tool name from the routing table (sent to the GitHub proxy)
    3. otherwise a -32601 error listing the registered tools
"""
import json
import logging
from typing import Any, Dict, Optional

from mcp.types import INTERNAL_ERROR, METHOD_NOT_FOUND
from pydantic import ValidationError

from . import __version__
from .github_client import GITHUB_TOOLS, GitHubProxy
from .schemas import JSONRPCRequest, ToolCallParams
from .tools import (
    CUSTOM_TOOLS,
    ToolRegistry,
    build_registry,
    get_tool_description,
    validate_tool_parameters,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "Kite MCP Server"


class JSONRPCError(Exception):
    """A JSON-RPC error destined for the `error` member of the response."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class MCPDispatcher:
    """Stateless JSON-RPC router over a tool registry and a GitHub proxy."""

    def __init__(self, registry: ToolRegistry, github: GitHubProxy):
        self.registry = registry
        self.github = github

    @classmethod
    def create(cls, github: Optional[GitHubProxy] = None) -> "MCPDispatcher":
        github = github or GitHubProxy()
        return cls(build_registry(github), github)

    # ── Entry point ──────────────────────────────────────────────────────

    def handle_raw(self, raw: bytes) -> Dict[str, Any]:
        """Parse an HTTP body and answer it; unparseable input is an internal error."""
        try:
            body = json.loads(raw)
        except ValueError as exc:
            logger.warning("Unparseable MCP request body: %s", exc)
            return self._error(None, JSONRPCError(INTERNAL_ERROR, "Internal error", str(exc)))
        return self.handle(body)

    def handle(self, body: Any) -> Dict[str, Any]:
        """Answer one JSON-RPC request. Never raises."""
        request_id = body.get("id") if isinstance(body, dict) else None
        try:
            request = JSONRPCRequest.model_validate(body)
            result = self._dispatch(request)
            return {"jsonrpc": "2.0", "id": request.id, "result": result}
        except JSONRPCError as exc:
            logger.info("JSON-RPC error %s: %s", exc.code, exc.message)
            return self._error(request_id, exc)
        except Exception as exc:
            logger.exception("Internal error while handling MCP request")
            return self._error(
                request_id, JSONRPCError(INTERNAL_ERROR, "Internal error", _describe(exc))
            )

    @staticmethod
    def _error(request_id: Any, exc: JSONRPCError) -> Dict[str, Any]:
        return {"jsonrpc": "2.0", "id": request_id, "error": exc.to_dict()}

    def _dispatch(self, request: JSONRPCRequest) -> Dict[str, Any]:
        if request.method == "tools/list":
            return self.list_tools()
        if request.method == "tools/call":
            call = ToolCallParams.model_validate(request.params)
            return self.call_tool(call.name, call.arguments)
        raise JSONRPCError(METHOD_NOT_FOUND, "Method not found")

    # ── Methods ──────────────────────────────────────────────────────────

    def list_tools(self) -> Dict[str, Any]:
        return {"tools": [descriptor.to_listing() for descriptor in self.registry]}

    def call_tool(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        descriptor = self.registry.get(name)
        if descriptor is not None:
            logger.info("Calling local tool %s", name)
            return descriptor.invoke(arguments)

        if not validate_tool_parameters(name, arguments):
            raise JSONRPCError(
                METHOD_NOT_FOUND,
                f"Unknown tool: {name}. Available tools: {', '.join(self.registry.names)}",
            )

        logger.info("Proxying %s", get_tool_description(name))
        return self.github.call(name, arguments)

    # ── Introspection ────────────────────────────────────────────────────

    def status(self) -> Dict[str, Any]:
        return {
            "message": f"{SERVER_NAME} is running",
            "availableTools": list(CUSTOM_TOOLS),
            "githubTools": list(GITHUB_TOOLS),
        }

    def server_info(self) -> Dict[str, Any]:
        return {
            "name": SERVER_NAME,
            "description": "Custom MCP server with GitHub integration and custom tools",
            "version": __version__,
            "capabilities": {
                "githubIntegration": True,
                "customTools": True,
            },
            "tools": {
                "github": list(GITHUB_TOOLS),
                "custom": list(CUSTOM_TOOLS),
                "total": len(GITHUB_TOOLS) + len(CUSTOM_TOOLS),
            },
        }


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
            for err in exc.errors()
        )
    return str(exc) or exc.__class__.__name__
