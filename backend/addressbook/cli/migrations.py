"""CLI for database migrations and maintenance."""
import argparse
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config

from addressbook.core.config import get_settings

BACKEND_DIR = Path(__file__).resolve().parents[2]
ALEMBIC_INI = BACKEND_DIR / "alembic.ini"


def alembic_config(database_url: Optional[str] = None, configure_logger: bool = True) -> Config:
    """Alembic config pointing at backend/alembic with the resolved database URL"""
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url or get_settings().database_url)
    cfg.attributes["configure_logger"] = configure_logger
    return cfg


def cmd_migrate(args):
    """Upgrade the schema to a revision (default: head)."""
    command.upgrade(alembic_config(args.database_url), args.revision)
    return 0


def cmd_downgrade(args):
    """Downgrade the schema to a revision."""
    command.downgrade(alembic_config(args.database_url), args.revision)
    return 0


def cmd_stamp(args):
    """Stamp alembic revision without running migrations."""
    command.stamp(alembic_config(args.database_url), args.revision)
    return 0


def cmd_cleanup_sessions(args):
    """Delete expired session tokens."""
    from addressbook.core.database import build_engine
    from addressbook.services.auth_service import AuthService
    from sqlalchemy.orm import Session

    engine = build_engine(args.database_url or get_settings().database_url)
    try:
        with Session(engine) as db:
            count = AuthService(db).cleanup_expired_sessions()
    finally:
        engine.dispose()
    print(f"Removed {count} expired sessions")
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="addressbook-db")
    p.add_argument("--database-url", help="Override DATABASE_URL for this command")
    sub = p.add_subparsers(dest="cmd")
    s = sub.add_parser("migrate", help="Run migrations (upgrade head)")
    s.add_argument("--revision", "-r", help="Target revision", default="head")
    s.set_defaults(func=cmd_migrate)
    s = sub.add_parser("downgrade", help="Downgrade to a revision")
    s.add_argument("--revision", "-r", help="Target revision", default="base")
    s.set_defaults(func=cmd_downgrade)
    s = sub.add_parser("stamp", help="Stamp alembic to a revision")
    s.add_argument("--revision", "-r", help="Revision to stamp", default="head")
    s.set_defaults(func=cmd_stamp)
    s = sub.add_parser("cleanup-sessions", help="Delete expired session tokens")
    s.set_defaults(func=cmd_cleanup_sessions)
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not hasattr(args, "func"):
        p.print_help()
        return 2
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
