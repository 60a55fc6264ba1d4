from . import auth, chat, github, mcp

__all__ = ["auth", "chat", "github", "mcp"]
