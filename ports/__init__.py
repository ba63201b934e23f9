from .llm import ChatProviderPort
from .repos import ConnectionsSessionPort, RowStorePort

__all__ = [
    "ChatProviderPort",
    "ConnectionsSessionPort",
    "RowStorePort",
]
