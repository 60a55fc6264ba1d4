"""
Tool registry – the locally implemented MCP tools and the routing table.

Local tools (callable directly):
    commit-splitter  – placeholder commit message analysis
    greet            – canned greeting
    github-proxy     – forwards {toolName, parameters} to the GitHub proxy

GitHub tools (proxied through the public GitHub REST API):
    search_repositories, get_repository, get_user, list_issues,
    list_pull_requests, get_file_contents, list_commits, list_branches,
    list_tags, list_releases
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Type

from pydantic import BaseModel, Field

from .github_client import GITHUB_TOOLS, GitHubProxy, text_content

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
#  ROUTING
# ═══════════════════════════════════════════════════════════════════════════


class ToolRoute(str, Enum):
    GITHUB = "github"
    CUSTOM = "custom"
    UNKNOWN = "unknown"


CUSTOM_TOOLS: Tuple[str, ...] = ("commit-splitter", "greet", "github-proxy")

ROUTING_TABLE: Dict[str, ToolRoute] = {
    **{name: ToolRoute.GITHUB for name in GITHUB_TOOLS},
    **{name: ToolRoute.CUSTOM for name in CUSTOM_TOOLS},
}


def route_tool_request(tool_name: str) -> ToolRoute:
    """Classify a tool name as github, custom or unknown."""
    return ROUTING_TABLE.get(tool_name, ToolRoute.UNKNOWN)


def get_tool_description(tool_name: str) -> str:
    route = route_tool_request(tool_name)
    if route is ToolRoute.GITHUB:
        return f"GitHub MCP tool: {tool_name} - Proxied through GitHub's public API"
    if route is ToolRoute.CUSTOM:
        return f"Custom tool: {tool_name} - Implemented locally in this MCP server"
    return f"Unknown tool: {tool_name} - Not available in this MCP server"


def validate_tool_parameters(tool_name: str, parameters: Any) -> bool:
    """Known tools accept any parameter bag; unknown tools accept nothing."""
    return route_tool_request(tool_name) is not ToolRoute.UNKNOWN


# ═══════════════════════════════════════════════════════════════════════════
#  PARAMETER MODELS
# ═══════════════════════════════════════════════════════════════════════════


class GreetParams(BaseModel):
    name: str = Field(description="The name of the user to greet")


class CommitSplitterParams(BaseModel):
    commitMessage: str = Field(description="The commit message to analyze and potentially split")


class GitHubProxyParams(BaseModel):
    toolName: str = Field(description="The GitHub MCP tool to call")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="Parameters for the GitHub MCP tool"
    )


# ═══════════════════════════════════════════════════════════════════════════
#  LOCAL TOOLS
# ═══════════════════════════════════════════════════════════════════════════


def greet(params: GreetParams) -> Dict[str, Any]:
    return text_content(f"Hello, {params.name}! Welcome to Kite MCP Server.")


def commit_splitter(params: CommitSplitterParams) -> Dict[str, Any]:
    """Placeholder until the splitting heuristics exist."""
    return text_content(
        "The commit splitter is not implemented yet.\n\n"
        f'Commit message received: "{params.commitMessage}"\n\n'
        "This tool will eventually:\n"
        "- Parse the commit message\n"
        "- Analyze the changes\n"
        "- Suggest how to split into smaller, focused commits\n"
        "- Provide recommendations for better commit practices"
    )


# ═══════════════════════════════════════════════════════════════════════════
#  REGISTRY
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ToolDescriptor:
    """One callable tool and the metadata advertised by tools/list."""

    name: str
    handler: Callable[[Any], Dict[str, Any]]
    params_model: Type[BaseModel]
    description: Optional[str] = None
    title: Optional[str] = None
    annotations: Dict[str, bool] = field(default_factory=dict)

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.params_model.model_json_schema()

    def invoke(self, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Validate ``arguments`` against the parameter model and run the handler."""
        params = self.params_model.model_validate(arguments or {})
        return self.handler(params)

    def to_listing(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description or "No description available",
            "inputSchema": self.input_schema or {"type": "object", "properties": {}},
        }


class ToolRegistry:
    """Ordered, read-only mapping of tool name to descriptor."""

    def __init__(self, descriptors):
        self._tools: Dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            self._tools[descriptor.name] = descriptor

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._tools)


def build_registry(github: GitHubProxy) -> ToolRegistry:
    """Build the registry; ``github`` backs the github-proxy tool."""

    def github_proxy(params: GitHubProxyParams) -> Dict[str, Any]:
        return github.call(params.toolName, params.parameters)

    registry = ToolRegistry([
        ToolDescriptor(
            name="commit-splitter",
            handler=commit_splitter,
            params_model=CommitSplitterParams,
            description="Split a large commit message into smaller, focused commits",
            title="Commit Message Splitter",
            annotations={"readOnlyHint": False, "destructiveHint": False, "idempotentHint": True},
        ),
        ToolDescriptor(
            name="greet",
            handler=greet,
            params_model=GreetParams,
            description="Greet the user by name",
            title="Greet the user",
            annotations={"readOnlyHint": True, "destructiveHint": False, "idempotentHint": True},
        ),
        ToolDescriptor(
            name="github-proxy",
            handler=github_proxy,
            params_model=GitHubProxyParams,
            description="Proxy requests to GitHub MCP server for existing GitHub functionality",
            title="GitHub MCP Proxy",
            annotations={"readOnlyHint": True, "destructiveHint": False, "idempotentHint": True},
        ),
    ])
    logger.debug("Registered tools: %s", ", ".join(registry.names))
    return registry
