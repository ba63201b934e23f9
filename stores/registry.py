from __future__ import annotations

from typing import Any, Callable, Dict, List

from config.settings import Settings
from stores.sqlite_store import SqliteRowStore
from stores.supabase_store import SupabaseRowStore


_REGISTRY: Dict[str, Callable[[Settings], Any]] = {
    SqliteRowStore.name: SqliteRowStore.from_settings,
    SupabaseRowStore.name: SupabaseRowStore.from_settings,
}


def get_row_store(settings: Settings):
    if settings.row_store not in _REGISTRY:
        raise KeyError(f"Unknown row store: {settings.row_store}")
    return _REGISTRY[settings.row_store](settings)


def available_row_stores() -> List[str]:
    return sorted(_REGISTRY)
