from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from config.settings import get_settings


def llm_usage_by_provider(log_path: Optional[str] = None) -> Dict[str, Dict[str, int]]:
    """Aggregate LLM usage from the JSONL trace log.

    Returns dict like { 'openai': {'calls': N, 'errors': E, 'tokens': T}, 'anthropic': {...} }
    """
    result: Dict[str, Dict[str, int]] = {}
    path = Path(log_path or get_settings().llm_log_path)
    if not path.exists():
        return result
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            try:
                rec = json.loads(line)
            except ValueError:
                continue
            if not isinstance(rec, dict):
                continue
            provider = rec.get("provider") or "unknown"
            usage = rec.get("usage") or {}
            bucket = result.setdefault(provider, {"calls": 0, "errors": 0, "tokens": 0})
            bucket["calls"] += 1
            if rec.get("status") != "ok":
                bucket["errors"] += 1
            try:
                bucket["tokens"] += int(usage.get("total_tokens") or 0)
            except (TypeError, ValueError):
                pass
    return result


def print_import_summary(meta: dict, source: Optional[str] = None) -> None:
    """Print summary of a connections import run."""
    stats = meta.get("validation_stats", {})
    print("\n" + "="*60)
    print("NUBBLE - CONNECTIONS IMPORT")
    print("="*60)
    print(f"Source: {source or 'N/A'}")
    print(f"Valid Rows: {stats.get('valid', 0)}")
    print(f"Skipped Rows (no name): {stats.get('skipped', 0)}")
    print(f"Imported Connections: {meta.get('processed_connections', 0)}")
    print(f"Total Connections For User: {meta.get('total_connections', 0)}")
    print("="*60)


def print_llm_usage(usage: Dict[str, Dict[str, int]]) -> None:
    if not usage:
        print("No LLM calls traced")
        return
    print("LLM Usage:")
    for provider, stats in usage.items():
        print(f"  {provider}: calls={stats.get('calls', 0)}, errors={stats.get('errors', 0)}, tokens={stats.get('tokens', 0)}")
