"""Chat completions streamed as Server-Sent Events."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError
from starlette.requests import Request

from ..chat import ChatRelay
from ..config import KiteSettings
from ..dependencies import get_chat_relay, get_settings_dep
from ..logger import get_logger
from ..schemas import ChatRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post("/chat")
async def chat_stream(
    request: Request,
    relay: ChatRelay = Depends(get_chat_relay),
    settings: KiteSettings = Depends(get_settings_dep),
):
    """
    Stream a Cerebras chat completion.

    Body: ``{"messages": [...], "model"?: str, "stream"?: bool, ...}``; any
    other keys (max_tokens, temperature, …) are passed to the provider.

    React usage:
        const es = await fetch('/api/chat', {method: 'POST', body});
        // read `data: {...}` frames until `data: [DONE]`
    """
    try:
        body = ChatRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as exc:
        logger.error(f"API route error: {exc}")
        return JSONResponse({"error": str(exc) or "Internal server error"}, status_code=500)

    if not isinstance(body.messages, list) or not body.messages:
        return JSONResponse(
            {"error": "Messages array is required and must not be empty"}, status_code=400
        )

    if not relay.is_configured:
        return JSONResponse(
            {"error": "CEREBRAS_API_KEY environment variable is not set"}, status_code=500
        )

    logger.info(f"Chat stream requested ({len(body.messages)} messages)")
    return StreamingResponse(
        relay.stream(
            body.messages,
            model=body.model,
            stream=body.stream,
            **body.provider_params,
        ),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
            **settings.cors_response_headers(),
        },
    )


@router.options("/chat")
def chat_preflight(settings: KiteSettings = Depends(get_settings_dep)):
    """CORS preflight for browsers posting to /api/chat."""
    return Response(status_code=200, headers=settings.cors_response_headers())
