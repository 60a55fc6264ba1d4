from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JSONRPCRequest(BaseModel):
    jsonrpc: str = "2.0"
    # int before float so integral ids are echoed back unchanged
    id: Optional[Union[str, int, float]] = None
    method: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _null_params(cls, value: Any) -> Any:
        return {} if value is None else value


class ToolCallParams(BaseModel):
    name: str
    arguments: Dict[str, Any]


class ChatRequest(BaseModel):
    """Body of POST /api/chat; unknown keys are forwarded to the provider."""

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    # checked by the route so a bad shape is a 400, not a validation error
    messages: Any = None
    model: Optional[str] = None
    stream: Optional[bool] = None

    @property
    def provider_params(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class OAuthTokenResponse(BaseModel):
    success: bool = True
    token: str
    tokenType: str
    scopes: List[str]
