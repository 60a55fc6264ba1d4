"""
GitHub API client – public read-only proxy for the MCP tools, plus the
authenticated issue listing used by the dashboard.

The proxy never raises: every outcome (success, GitHub error payload, network
fault, missing parameter) comes back as MCP text content.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from .config import settings

logger = logging.getLogger(__name__)

QueryBuilder = Callable[[Dict[str, Any]], Dict[str, Any]]


def _no_query(parameters: Dict[str, Any]) -> Dict[str, Any]:
    return {}


def _search_query(parameters: Dict[str, Any]) -> Dict[str, Any]:
    return {"q": parameters["query"], "per_page": parameters.get("limit") or 10}


def _state_query(parameters: Dict[str, Any]) -> Dict[str, Any]:
    return {"state": parameters.get("state") or "open"}


def _limit_query(parameters: Dict[str, Any]) -> Dict[str, Any]:
    return {"per_page": parameters.get("limit") or 10}


# tool name -> (path template, query builder); insertion order is the public order
GITHUB_ENDPOINTS: Dict[str, Tuple[str, QueryBuilder]] = {
    "search_repositories": ("/search/repositories", _search_query),
    "get_repository": ("/repos/{owner}/{repo}", _no_query),
    "get_user": ("/users/{username}", _no_query),
    "list_issues": ("/repos/{owner}/{repo}/issues", _state_query),
    "list_pull_requests": ("/repos/{owner}/{repo}/pulls", _state_query),
    "get_file_contents": ("/repos/{owner}/{repo}/contents/{path}", _no_query),
    "list_commits": ("/repos/{owner}/{repo}/commits", _limit_query),
    "list_branches": ("/repos/{owner}/{repo}/branches", _no_query),
    "list_tags": ("/repos/{owner}/{repo}/tags", _no_query),
    "list_releases": ("/repos/{owner}/{repo}/releases", _no_query),
}

GITHUB_TOOLS: Tuple[str, ...] = tuple(GITHUB_ENDPOINTS)


# ── Helpers ────────────────────────────────────────────────────────────────


def _headers(token: Optional[str] = None) -> Dict[str, str]:
    h = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        h["Authorization"] = f"Bearer {token}"
    return h


def text_content(text: str) -> Dict[str, Any]:
    """Wrap plain text as an MCP tool result."""
    return {"content": [{"type": "text", "text": text}]}


# ── Public proxy ──────────────────────────────────────────────────────────


class GitHubProxy:
    """
    Unauthenticated proxy over a fixed set of GitHub REST endpoints.

    Each call performs exactly one GET. Pass ``transport`` to route the
    traffic somewhere other than the network (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30,
    ):
        self.api_base = (api_base or settings.github_api_base).rstrip("/")
        self._transport = transport
        self._timeout = timeout

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request and return parsed JSON (error bodies included)."""
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            resp = client.get(
                f"{self.api_base}{path}", headers=_headers(), params=params or None
            )
            return resp.json()

    def call(self, tool_name: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one GitHub tool and wrap the outcome as MCP text content.

        Args:
            tool_name: One of ``GITHUB_TOOLS``.
            parameters: Path and query values for the endpoint.

        Returns:
            ``{"content": [{"type": "text", "text": ...}]}``
        """
        parameters = parameters or {}
        endpoint = GITHUB_ENDPOINTS.get(tool_name)
        if endpoint is None:
            logger.warning("Unknown GitHub tool requested: %s", tool_name)
            return text_content(
                f"❌ Unknown GitHub MCP tool: {tool_name}. \n\n"
                f"Available tools: {', '.join(GITHUB_TOOLS)}\n\n"
                "Note: This proxy works with public GitHub data only "
                "(no authentication required)."
            )

        path_template, build_query = endpoint
        try:
            path = path_template.format(**parameters)
            result = self._get(path, build_query(parameters))
        except KeyError as exc:
            logger.warning("GitHub tool %s missing parameter %s", tool_name, exc)
            return self._fault_text(tool_name, f"missing parameter {exc}")
        except Exception as exc:
            logger.exception("Error calling GitHub tool %s", tool_name)
            return self._fault_text(tool_name, str(exc))

        if not result or (isinstance(result, dict) and "message" in result):
            message = result.get("message") if isinstance(result, dict) else None
            logger.info("GitHub API error for %s: %s", tool_name, message)
            return text_content(
                f"❌ GitHub API Error: {message or 'Unknown error'}\n\n"
                "This might be because:\n"
                "- The repository is private (requires authentication)\n"
                "- The repository/user doesn't exist\n"
                "- Rate limiting (GitHub API has rate limits for unauthenticated requests)\n\n"
                "For private repositories, you would need to set up authentication."
            )

        logger.info("GitHub tool %s succeeded", tool_name)
        return text_content(
            f"✅ GitHub MCP Tool: {tool_name}\n\n"
            f"Result:\n{json.dumps(result, indent=2)}\n\n"
            "Note: This works with public GitHub data only. "
            "For private repositories, authentication would be required."
        )

    @staticmethod
    def _fault_text(tool_name: str, message: str) -> Dict[str, Any]:
        return text_content(
            f"❌ Error calling GitHub MCP tool {tool_name}: {message}\n\n"
            "This might be due to:\n"
            "- Network connectivity issues\n"
            "- Invalid parameters\n"
            "- GitHub API rate limiting\n\n"
            "Try again later or check your parameters."
        )


# ── Authenticated calls ───────────────────────────────────────────────────


def list_issues(
    owner: str,
    repo: str,
    token: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> List[Dict[str, Any]]:
    """Fetch open issues for a repository with the caller's OAuth token."""
    base = settings.github_api_base.rstrip("/")
    with httpx.Client(timeout=30, transport=transport) as client:
        resp = client.get(
            f"{base}/repos/{owner}/{repo}/issues",
            headers=_headers(token),
            params={"state": "open"},
        )
        resp.raise_for_status()
        issues = resp.json()

    logger.info(f"Fetched {len(issues)} open issues from {owner}/{repo}")
    return issues
