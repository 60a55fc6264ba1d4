"""Authenticated GitHub calls made with the user's OAuth token."""
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from .. import github_client as gh
from ..logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["GitHub"])


@router.get("/github")
def api_issues(
    owner: Optional[str] = Query(None),
    repo: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
):
    """List open issues of a repository the token can read."""
    if not owner or not repo:
        return JSONResponse({"error": "Owner and repo parameters are required"}, status_code=400)

    if not token:
        return JSONResponse({"error": "Authentication token is required"}, status_code=401)

    try:
        issues = gh.list_issues(owner, repo, token)
    except Exception:
        logger.exception("Error fetching issues for %s/%s", owner, repo)
        return JSONResponse({"error": "Failed to fetch issues from GitHub"}, status_code=500)

    return {"issues": issues}
