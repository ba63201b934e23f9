from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """State handed from step to step during a connections import."""

    user_id: Optional[int] = None
    source: Optional[str] = None
    connections: List[Dict[str, Any]] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        init_logging()
        for step in self.steps:
            name = type(step).__name__
            t0 = time.time()
            try:
                ctx = step.run(ctx)
            except Exception as e:
                logger.error(
                    "import step failed",
                    extra={"step": name, "status": "error", "error": str(e)},
                )
                raise
            logger.info(
                "import step done: %d rows",
                len(ctx.connections or []),
                extra={"step": name, "status": "ok", "duration_ms": int((time.time() - t0) * 1000)},
            )
        return ctx
