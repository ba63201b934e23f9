from __future__ import annotations

import logging
from typing import Any, Dict, List

from pipelines.runner import RunContext
from services.domain_utils import normalize_linkedin_profile_url


logger = logging.getLogger(__name__)


class ValidateConnections:
    """Drop rows without a name and tidy field values before persistence."""

    def run(self, ctx: RunContext) -> RunContext:
        valid: List[Dict[str, Any]] = []
        skipped = 0
        for row in ctx.connections or []:
            first = (row.get("first_name") or "").strip()
            last = (row.get("last_name") or "").strip()
            if not first and not last:
                skipped += 1
                continue
            cleaned = {k: (v.strip() if isinstance(v, str) else v) for k, v in row.items()}
            cleaned["first_name"] = first
            cleaned["last_name"] = last
            url = cleaned.get("profile_url")
            if url:
                # Keep non-LinkedIn URLs as given
                cleaned["profile_url"] = normalize_linkedin_profile_url(url) or url
            valid.append(cleaned)
        ctx.connections = valid
        ctx.meta["validation_stats"] = {"valid": len(valid), "skipped": skipped}
        logger.info(
            "validated %d connections (%d skipped)",
            len(valid),
            skipped,
            extra={"step": "validate_connections", "status": "ok"},
        )
        return ctx
