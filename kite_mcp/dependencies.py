"""FastAPI dependencies – hand out the collaborators built by create_app()."""
from starlette.requests import Request

from .chat import ChatRelay
from .config import KiteSettings
from .dispatcher import MCPDispatcher
from .oauth import GitHubOAuth


def get_settings_dep(request: Request) -> KiteSettings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> MCPDispatcher:
    return request.app.state.dispatcher


def get_oauth(request: Request) -> GitHubOAuth:
    return request.app.state.oauth


def get_chat_relay(request: Request) -> ChatRelay:
    return request.app.state.chat_relay
