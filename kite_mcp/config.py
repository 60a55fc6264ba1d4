"""Configuration for the Kite MCP Server."""
import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Load .env from project root (one level above kite_mcp/)
# Uses Path(__file__) so it works regardless of cwd.
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=False)


class KiteSettings(BaseSettings):
    """Settings for the Kite MCP Server."""

    # GitHub OAuth app
    github_client_id: str = Field(default="")
    github_client_secret: str = Field(default="")
    github_oauth_base: str = Field(default="https://github.com/login/oauth")
    github_oauth_scope: str = Field(default="repo user read:org")

    # Public GitHub REST API
    github_api_base: str = Field(default="https://api.github.com")

    # Where the frontend lives (OAuth redirects land here)
    next_public_base_url: str = Field(default="http://localhost:3000")

    # Cerebras chat completions
    cerebras_api_key: str = Field(default="")
    cerebras_model: str = Field(default="gpt-oss-120b")
    stream: bool = Field(default=True)

    # CORS for the chat stream
    cors_origin: str = Field(default="*")
    cors_methods: str = Field(default="POST, OPTIONS")
    cors_headers: str = Field(default="Content-Type")

    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=3000)
    log_level: str = Field(default="INFO")

    class Config:
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def cors_origins(self) -> List[str]:
        """CORS_ORIGIN split into a list for the middleware."""
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()] or ["*"]

    def cors_response_headers(self) -> dict:
        return {
            "Access-Control-Allow-Origin": self.cors_origin,
            "Access-Control-Allow-Methods": self.cors_methods,
            "Access-Control-Allow-Headers": self.cors_headers,
        }


@lru_cache()
def get_settings() -> KiteSettings:
    """Return a cached settings instance."""
    return KiteSettings()


settings = get_settings()
