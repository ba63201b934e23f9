from __future__ import annotations

from typing import Optional, Protocol


class ChatProviderPort(Protocol):
    """A hosted chat-completion API normalized to one success/error shape.

    ``complete`` returns the assistant text or raises ``ProviderError``.
    """

    name: str

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        request_id: Optional[str] = None,
    ) -> str:
        ...
