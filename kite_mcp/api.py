"""
Kite MCP Server – FastAPI application

MCP endpoint (JSON-RPC 2.0):
    GET  /mcp                 - server status and tool names
    POST /mcp                 - tools/list, tools/call

GitHub OAuth:
    GET  /api/oauth           - redirect to GitHub's authorization page
    GET  /api/auth/callback   - exchange code, redirect to the dashboard
    GET  /api/auth            - exchange code, return JSON

GitHub (authenticated):
    GET  /api/github          - open issues for owner/repo with a user token

Chat (Server-Sent Events):
    POST /api/chat            - Cerebras completion stream
    OPTIONS /api/chat         - CORS preflight

    GET  /health
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .chat import ChatRelay
from .config import KiteSettings, settings as default_settings
from .dispatcher import MCPDispatcher
from .oauth import GitHubOAuth
from .routes import auth, chat, github, mcp

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[KiteSettings] = None,
    dispatcher: Optional[MCPDispatcher] = None,
    oauth: Optional[GitHubOAuth] = None,
    chat_relay: Optional[ChatRelay] = None,
) -> FastAPI:
    """Build the application; every collaborator can be swapped for tests."""
    settings = settings or default_settings

    app = FastAPI(
        title="Kite MCP Server",
        description="MCP tool server with GitHub OAuth, GitHub proxy tools and Cerebras chat streaming",
        version=__version__,
    )

    app.state.settings = settings
    app.state.dispatcher = dispatcher or MCPDispatcher.create()
    app.state.oauth = oauth or GitHubOAuth(settings)
    app.state.chat_relay = chat_relay or ChatRelay(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(mcp.router)
    app.include_router(auth.router)
    app.include_router(github.router)
    app.include_router(chat.router)

    @app.get("/health", tags=["Health"])
    def health():
        return {
            "status": "ok",
            "service": "kite-mcp-server",
            "mcp_endpoint": "/mcp",
            "oauth_configured": app.state.oauth.is_configured,
            "llm_configured": app.state.chat_relay.is_configured,
            "server": app.state.dispatcher.server_info(),
        }

    logger.debug("Application created (%d tools registered)", len(app.state.dispatcher.registry))
    return app


app = create_app()
