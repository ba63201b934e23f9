from .connection_record import ConnectionRecord
from .chat import ChatRequest, ChatResult

__all__ = [
    "ConnectionRecord",
    "ChatRequest",
    "ChatResult",
]
