"""
Chat relay – streams Cerebras chat completions to the browser as
Server-Sent Events.

Every stream ends with ``data: [DONE]``. A provider fault is reported as one
``{"error": {...}}`` frame just before it.
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from .config import KiteSettings, settings as default_settings

logger = logging.getLogger(__name__)

CHUNK_FIELDS = ("id", "object", "created", "model", "choices")
DONE_FRAME = "data: [DONE]\n\n"


def sse_frame(payload: Any) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _as_dict(obj: Any) -> Dict[str, Any]:
    """Provider responses are pydantic models; tests feed plain dicts."""
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    return {name: getattr(obj, name, None) for name in CHUNK_FIELDS}


def chunk_payload(chunk: Any) -> Dict[str, Any]:
    data = _as_dict(chunk)
    return {name: data.get(name) for name in CHUNK_FIELDS}


class ChatRelay:
    """Opens a completion against Cerebras and yields SSE frames."""

    def __init__(self, settings: Optional[KiteSettings] = None, client: Any = None):
        self.settings = settings or default_settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.settings.cerebras_api_key)

    def _get_client(self):
        """Build the AsyncCerebras client on first use."""
        if self._client is None:
            if not self.settings.cerebras_api_key:
                raise RuntimeError("CEREBRAS_API_KEY environment variable is not set")
            from cerebras.cloud.sdk import AsyncCerebras

            self._client = AsyncCerebras(
                api_key=self.settings.cerebras_api_key,
                warm_tcp_connection=False,
            )
        return self._client

    async def stream(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        stream: Optional[bool] = None,
        **params: Any,
    ) -> AsyncIterator[str]:
        """
        Relay one completion as SSE frames.

        Args:
            messages: Chat messages, forwarded verbatim.
            model: Overrides CEREBRAS_MODEL.
            stream: Overrides STREAM; a non-streamed result becomes one frame.
            **params: Extra provider parameters (max_tokens, temperature, …).
        """
        model = model or self.settings.cerebras_model
        should_stream = self.settings.stream if stream is None else stream
        chunks = 0
        try:
            response = await self._get_client().chat.completions.create(
                messages=messages,
                model=model,
                stream=should_stream,
                **params,
            )
            if should_stream:
                async for chunk in response:
                    chunks += 1
                    yield sse_frame(chunk_payload(chunk))
            else:
                chunks = 1
                yield sse_frame(chunk_payload(response))
        except Exception as exc:
            logger.exception("Streaming error after %d chunk(s)", chunks)
            yield sse_frame({
                "error": {
                    "message": str(exc) or "An error occurred",
                    "type": "server_error",
                }
            })
        else:
            logger.info("Relayed %d chunk(s) from %s", chunks, model)

        yield DONE_FRAME
