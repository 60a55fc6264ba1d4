"""
MCP stdio server – the local tools served over the official MCP transport,
for desktop clients that launch the server as a subprocess.

Tools:
    greet            – greet a user by name
    commit-splitter  – placeholder commit message analysis
    github-proxy     – call one of the public GitHub tools
"""
import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .dispatcher import SERVER_NAME
from .github_client import GitHubProxy
from .tools import ToolRegistry, build_registry

logger = logging.getLogger(__name__)


def _run_text(registry: ToolRegistry, name: str, arguments: Dict[str, Any]) -> str:
    result = registry.get(name).invoke(arguments)
    return "\n".join(block["text"] for block in result["content"] if block.get("type") == "text")


def build_mcp_server(registry: Optional[ToolRegistry] = None) -> FastMCP:
    """Create a FastMCP server exposing ``registry``'s tools."""
    registry = registry or build_registry(GitHubProxy())

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "MCP server with a greeting tool, a commit message splitter and a "
            "proxy to public GitHub repository, user and release data."
        ),
    )

    def greet(name: str) -> str:
        return _run_text(registry, "greet", {"name": name})

    def commit_splitter(commitMessage: str) -> str:
        return _run_text(registry, "commit-splitter", {"commitMessage": commitMessage})

    def github_proxy(toolName: str, parameters: Optional[Dict[str, Any]] = None) -> str:
        return _run_text(
            registry, "github-proxy", {"toolName": toolName, "parameters": parameters or {}}
        )

    for name, fn in (
        ("commit-splitter", commit_splitter),
        ("greet", greet),
        ("github-proxy", github_proxy),
    ):
        descriptor = registry.get(name)
        server.add_tool(
            fn,
            name=name,
            title=descriptor.title,
            description=descriptor.description,
            annotations=ToolAnnotations(**descriptor.annotations),
        )

    logger.debug("FastMCP server built with %d tools", len(registry))
    return server
