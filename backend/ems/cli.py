from __future__ import annotations

import argparse

import uvicorn

from ems.core.config import settings
from ems.core.logging import configure_logging
from ems.db.session import Database, transaction
from ems.domains.barcodes.service import generate_missing_barcodes
from ems.seed.seed_data import ensure_admin, seed


def database_from_args(args: argparse.Namespace) -> Database:
    return Database(args.database_url)


def cmd_init_db(args: argparse.Namespace) -> None:
    database = database_from_args(args)
    database.create_all()
    print("Created database tables")


def cmd_seed(args: argparse.Namespace) -> None:
    database = database_from_args(args)
    with database.session() as db:
        seed(db, admin_email=args.admin_email, admin_password=args.admin_password)
    print(f"Seeded reference data and admin account {args.admin_email}")


def cmd_create_admin(args: argparse.Namespace) -> None:
    database = database_from_args(args)
    with database.session() as db:
        with transaction(db):
            ensure_admin(db, args.email, args.password, username=args.username)
    print(f"Admin account ready: {args.email}")


def cmd_generate_barcodes(args: argparse.Namespace) -> None:
    database = database_from_args(args)
    with database.session() as db:
        generated = generate_missing_barcodes(db)
    for detail_id, barcode in generated:
        print(f"{detail_id} {barcode}")
    print(f"Generated {len(generated)} barcodes")


def cmd_serve(args: argparse.Namespace) -> None:
    uvicorn.run("ems.main:app", host=args.host, port=args.port, reload=args.reload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Employee management admin CLI")
    parser.add_argument("--database-url", help="Overrides EMS_DATABASE_URL")
    sub = parser.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create all tables")
    init_db.set_defaults(func=cmd_init_db)

    seed_cmd = sub.add_parser("seed", help="Insert reference hierarchy, policies and an admin")
    seed_cmd.add_argument("--admin-email", default="admin@example.com")
    seed_cmd.add_argument("--admin-password", default="admin123")
    seed_cmd.set_defaults(func=cmd_seed)

    admin = sub.add_parser("create-admin", help="Create or reset an admin account")
    admin.add_argument("email")
    admin.add_argument("password")
    admin.add_argument("--username", default="admin")
    admin.set_defaults(func=cmd_create_admin)

    barcodes = sub.add_parser("generate-barcodes", help="Give every assigned employee without a barcode one")
    barcodes.set_defaults(func=cmd_generate_barcodes)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> None:
    configure_logging(settings.log_level, json_logs=settings.env != "dev")
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
