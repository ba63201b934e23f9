from __future__ import annotations

import os


# Central routing for LLM use-cases. Edit here to change per-operation defaults.
# You can also override per-route provider/model via env vars for quick testing.
#
# Keys are use_case identifiers consumed by services/llm_client.py
ROUTES: dict[str, dict] = {
    # Network assistant chat (preferred provider, single fallback hop)
    "network_chat": {
        "provider": os.getenv("LLM_CHAT_PROVIDER", "anthropic").strip().lower(),
        "fallback_provider": os.getenv("LLM_CHAT_FALLBACK_PROVIDER", "openai").strip().lower(),
        "openai_model": os.getenv("OPENAI_MODEL_CHAT"),  # falls back to global OPENAI_MODEL
        "anthropic_model": os.getenv("ANTHROPIC_MODEL_CHAT"),  # falls back to global ANTHROPIC_MODEL
        "temperature": 0.7,
        "max_tokens": 300,
        # Logical operation name for logging (not a vendor API name)
        "operation": "network_chat",
    },
}


def chat_route() -> dict:
    return ROUTES["network_chat"]
