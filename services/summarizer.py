from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from models import ConnectionRecord


EMPTY_SUMMARY = "No connection data available."
TOP_N = 5
DETAIL_LIMIT = 20


ConnectionLike = Union[ConnectionRecord, Mapping[str, Any]]


def _as_record(item: ConnectionLike) -> ConnectionRecord:
    if isinstance(item, ConnectionRecord):
        return item
    return ConnectionRecord.model_validate(dict(item))


def _top_values(values: Iterable[Optional[str]], limit: int = TOP_N) -> str:
    """Format the most frequent non-empty values as ``"name (count)"``.

    Keys are compared verbatim: "Acme" and "acme" are counted separately.
    Equal counts keep first-encountered order (Counter preserves insertion
    order and ``most_common`` sorts stably).
    """
    counts = Counter(v for v in values if v)
    top = [f"{name} ({count})" for name, count in counts.most_common(limit)]
    return ", ".join(top) or "None"


def _detail_line(c: ConnectionRecord) -> str:
    return (
        f"- {c.full_name}, {c.position or 'No position'} at {c.company or 'No company'}, "
        f"Location: {c.location or 'Unknown'}"
    )


def summarize_connections(connections: Optional[Sequence[ConnectionLike]]) -> str:
    """Reduce a user's connections to a bounded digest for the assistant prompt.

    Pure and deterministic: total count, top companies and locations, then
    the first ``DETAIL_LIMIT`` connections in the order the store returned them.
    """
    if not connections:
        return EMPTY_SUMMARY

    records: List[ConnectionRecord] = [_as_record(c) for c in connections]
    lines = [
        f"Total connections: {len(records)}",
        f"Top companies: {_top_values(c.company for c in records)}",
        f"Top locations: {_top_values(c.location for c in records)}",
        "",
        f"Detailed connection data (limited to {DETAIL_LIMIT} most recent):",
    ]
    lines.extend(_detail_line(c) for c in records[:DETAIL_LIMIT])
    return "\n".join(lines)
