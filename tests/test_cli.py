from __future__ import annotations

import json
import sys
from typing import List


def _run_cli_with_args(args_list: List[str]) -> None:
    """Run cli.py main() with provided argv in-process (no subprocess)."""
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        # Import fresh to ensure clean parser each time
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # type: ignore
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            code = e.code if isinstance(e.code, int) else (0 if e.code is None else 1)
            if code != 0:
                raise
    finally:
        sys.argv = argv_backup


def _token_from_output(out: str) -> str:
    return out.strip().split("access_token=")[-1]


def test_cli_create_user_import_and_summarize(tmp_path, capsys):
    db_path = tmp_path / "cli.db"
    csv_path = tmp_path / "connections.csv"
    csv_path.write_text(
        "First Name,Last Name,Company,Position,Location\n"
        "Ada,Lovelace,Acme,Engineer,London\n"
        "Grace,Hopper,Acme,Admiral,Arlington\n"
        "Alan,Turing,Globex,,\n",
        encoding="utf-8",
    )

    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--db", str(db_path), "create-user", "--email", "me@example.com"])
    token = _token_from_output(capsys.readouterr().out)
    assert len(token) > 20

    # create-user is idempotent and reports the existing token
    _run_cli_with_args(["--db", str(db_path), "create-user", "--email", "ME@example.com"])
    assert _token_from_output(capsys.readouterr().out) == token

    _run_cli_with_args(["--db", str(db_path), "import-csv", "--email", "me@example.com", "--input", str(csv_path)])
    assert "Imported Connections: 3" in capsys.readouterr().out

    _run_cli_with_args(["--db", str(db_path), "list-connections", "--email", "me@example.com", "--limit", "2"])
    listed = json.loads(capsys.readouterr().out)
    assert [c["first_name"] for c in listed] == ["Ada", "Grace"]

    _run_cli_with_args(["--db", str(db_path), "summarize", "--email", "me@example.com"])
    out = capsys.readouterr().out
    assert "Total connections: 3" in out
    assert "Top companies: Acme (2), Globex (1)" in out
    assert "- Alan Turing, No position at Globex, Location: Unknown" in out


def test_cli_llm_usage_aggregates_trace(tmp_path, capsys):
    log_file = tmp_path / "calls.jsonl"
    log_file.write_text(
        "\n".join([
            json.dumps({"provider": "anthropic", "status": "error", "usage": {}}),
            json.dumps({"provider": "openai", "status": "ok", "usage": {"total_tokens": 42}}),
            "not json",
        ]),
        encoding="utf-8",
    )
    _run_cli_with_args(["llm-usage", "--log-path", str(log_file)])
    out = capsys.readouterr().out
    assert "anthropic: calls=1, errors=1, tokens=0" in out
    assert "openai: calls=1, errors=0, tokens=42" in out
