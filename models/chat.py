from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Inbound chat call: the user's question plus the caller's row store credential."""

    query: str = ""
    access_token: str = Field(default="", validation_alias=AliasChoices("accessToken", "access_token"))
    provider: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ChatResult(BaseModel):
    """Outcome of one chat exchange: either ``response`` or ``error`` is set."""

    response: Optional[str] = None
    error: Optional[str] = None
    details: Optional[str] = None
    kind: Optional[str] = None
    provider: Optional[str] = None
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return self.response is not None

    def to_body(self, include_details: bool = True) -> Dict[str, Any]:
        if self.ok:
            return {"response": self.response}
        body: Dict[str, Any] = {"error": self.error}
        if include_details and self.details:
            body["details"] = self.details
        return body
