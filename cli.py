import argparse
import json
from pathlib import Path

from config.settings import get_settings, validate_settings
from db.connection import open_database
from db.repos.connections_repo import ConnectionsRepo
from db.repos.users_repo import UsersRepo
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import PersistConnections, ValidateConnections
from services.chat_service import build_chat_service
from services.csv_import import read_connections_csv
from services.llm_client import known_providers
from services.reporting import llm_usage_by_provider, print_import_summary, print_llm_usage
from services.summarizer import summarize_connections
from utils.logging_setup import init_logging


def _open_db(args):
    return open_database(args.db)


def _require_user(conn, email: str) -> int:
    found = UsersRepo(conn).find_by_email(email)
    if not found:
        raise SystemExit(f"No user with email {email}; run create-user first")
    return found[0]


def cmd_bootstrap(args):
    conn = _open_db(args)
    conn.close()
    print("Schema ready")


def cmd_create_user(args):
    conn = _open_db(args)
    try:
        existing = UsersRepo(conn).find_by_email(args.email)
        if existing:
            print(f"User exists: id={existing[0]} access_token={existing[1]}")
            return
        user_id, token = UsersRepo(conn).create(args.email)
        print(f"Created user id={user_id} access_token={token}")
    finally:
        conn.close()


def cmd_import_csv(args):
    conn = _open_db(args)
    try:
        user_id = _require_user(conn, args.email)
        rows = read_connections_csv(args.input)
        ctx = RunContext(user_id=user_id, source=str(args.input))
        ctx.connections = rows
        pipeline = Pipeline([
            ValidateConnections(),
            PersistConnections(conn),
        ])
        ctx = pipeline.run(ctx)
        print_import_summary(ctx.meta, source=ctx.source)
    finally:
        conn.close()


def cmd_list_connections(args):
    conn = _open_db(args)
    try:
        user_id = _require_user(conn, args.email)
        records = ConnectionsRepo(conn).list_for_user(user_id, limit=args.limit)
        out = [r.model_dump(exclude={"user_id"}) for r in records]
        print(json.dumps(out, indent=2, ensure_ascii=False))
    finally:
        conn.close()


def cmd_summarize(args):
    conn = _open_db(args)
    try:
        user_id = _require_user(conn, args.email)
        print(summarize_connections(ConnectionsRepo(conn).list_for_user(user_id)))
    finally:
        conn.close()


def cmd_chat(args):
    settings = get_settings()
    validate_settings(settings)
    service = build_chat_service(settings)
    result = service.handle(args.query, args.token, args.provider)
    print(json.dumps(result.to_body(include_details=True), indent=2, ensure_ascii=False))


def cmd_llm_usage(args):
    print_llm_usage(llm_usage_by_provider(args.log_path))


def cmd_serve(args):
    import uvicorn
    from app import create_app

    settings = get_settings()
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=settings.log_level.lower())


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Nubble network assistant CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_user = sub.add_parser("create-user", help="Create a local user and print its access token")
    p_user.add_argument("--email", required=True)
    p_user.set_defaults(func=cmd_create_user)

    p_imp = sub.add_parser("import-csv", help="Import a contacts/connections CSV export for a user")
    p_imp.add_argument("--email", required=True, help="Owner of the imported connections")
    p_imp.add_argument("--input", required=True, type=Path, help="Path to CSV file")
    p_imp.set_defaults(func=cmd_import_csv)

    p_ls = sub.add_parser("list-connections", help="Print a user's connections as JSON")
    p_ls.add_argument("--email", required=True)
    p_ls.add_argument("--limit", type=int, default=None)
    p_ls.set_defaults(func=cmd_list_connections)

    p_sum = sub.add_parser("summarize", help="Print the network summary sent to the assistant")
    p_sum.add_argument("--email", required=True)
    p_sum.set_defaults(func=cmd_summarize)

    p_chat = sub.add_parser("chat", help="Ask the assistant a question about your network")
    p_chat.add_argument("--token", required=True, help="Caller access token")
    p_chat.add_argument("--query", "-q", required=True)
    p_chat.add_argument("--provider", choices=known_providers(), default=None, help="Primary provider (default from routes)")
    p_chat.set_defaults(func=cmd_chat)

    p_usage = sub.add_parser("llm-usage", help="Aggregate traced LLM calls per provider")
    p_usage.add_argument("--log-path", default=None, help="Trace file (default: LLM_LOG_PATH)")
    p_usage.set_defaults(func=cmd_llm_usage)

    p_srv = sub.add_parser("serve", help="Run the HTTP chat endpoint")
    p_srv.add_argument("--host", default=settings.host)
    p_srv.add_argument("--port", type=int, default=settings.port)
    p_srv.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
