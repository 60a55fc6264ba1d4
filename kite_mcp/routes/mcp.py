"""MCP JSON-RPC endpoint."""
from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from ..dependencies import get_dispatcher
from ..dispatcher import MCPDispatcher

router = APIRouter(prefix="/mcp", tags=["MCP"])


@router.get("")
def mcp_status(dispatcher: MCPDispatcher = Depends(get_dispatcher)):
    """Which tools this server answers for."""
    return dispatcher.status()


@router.post("")
async def mcp_rpc(request: Request, dispatcher: MCPDispatcher = Depends(get_dispatcher)):
    """
    JSON-RPC 2.0 endpoint for MCP clients.

    Supports `tools/list` and `tools/call`. Errors are always returned as
    JSON-RPC error objects with HTTP 200.
    """
    raw = await request.body()
    # GitHub proxy calls block on httpx
    return await run_in_threadpool(dispatcher.handle_raw, raw)
