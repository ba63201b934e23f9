from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Dict, List, Optional


def map_header(header: str) -> str:
    """Map a CSV header to a connection field by keyword; unknown headers pass through lowercased."""
    h = header.strip().lower()
    if "first" in h and "name" in h:
        return "first_name"
    if "last" in h and "name" in h:
        return "last_name"
    if "email" in h:
        return "email"
    if "company" in h:
        return "company"
    if "position" in h or "title" in h:
        return "position"
    if "location" in h or "city" in h or "state" in h:
        return "location"
    if "connect" in h and "on" in h:
        return "connected_on"
    if "url" in h or "profile" in h:
        return "profile_url"
    return h


def _find_header_row(rows: List[List[str]]) -> int:
    # LinkedIn exports start with a "Notes:" preamble before the real header row
    for i, row in enumerate(rows):
        if any(map_header(cell) == "first_name" for cell in row):
            return i
    return 0


def parse_connections_csv(text: str) -> List[Dict[str, Optional[str]]]:
    """Parse exported contacts into dicts keyed by connection field names."""
    rows = [row for row in csv.reader(io.StringIO(text.lstrip("\ufeff"))) if any(c.strip() for c in row)]
    if not rows:
        return []
    start = _find_header_row(rows)
    headers = [map_header(h) for h in rows[start]]
    contacts: List[Dict[str, Optional[str]]] = []
    for row in rows[start + 1:]:
        contact: Dict[str, Optional[str]] = {}
        for index, field in enumerate(headers):
            if not field:
                continue
            value = row[index].strip() if index < len(row) else ""
            contact[field] = value
        contacts.append(contact)
    return contacts


def read_connections_csv(path: str | Path) -> List[Dict[str, Optional[str]]]:
    return parse_connections_csv(Path(path).read_text(encoding="utf-8-sig"))
