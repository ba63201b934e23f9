from __future__ import annotations

import json

from conftest import make_settings
from utils.llm_logger import log_call, sha256_text


def test_llm_trace_writes_jsonl(tmp_path):
    log_file = tmp_path / "llm_calls.jsonl"
    settings = make_settings(llm_trace=True, llm_log_path=str(log_file))

    log_call(
        caller="unit.test",
        provider="anthropic",
        model="claude-x",
        operation="network_chat",
        prompt_name="demo",
        prompt_hash="abc",
        duration_ms=42,
        status="ok",
        usage={"total_tokens": 10},
        request_id="req-123",
        extras={"fallback": False},
        settings=settings,
    )

    assert log_file.exists()
    rec = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert rec["caller"] == "unit.test"
    assert rec["provider"] == "anthropic"
    assert rec["operation"] == "network_chat"
    assert rec["request_id"] == "req-123"
    assert rec["extras"] == {"fallback": False}
    assert rec.get("usage", {}).get("total_tokens") == 10


def test_llm_trace_disabled_writes_nothing(tmp_path):
    log_file = tmp_path / "llm_calls.jsonl"
    log_call(
        caller="unit.test",
        provider="openai",
        model=None,
        operation="network_chat",
        settings=make_settings(llm_trace=False, llm_log_path=str(log_file)),
    )
    assert not log_file.exists()


def test_sha256_text_handles_empty():
    assert sha256_text(None) is None
    assert len(sha256_text("prompt")) == 64
