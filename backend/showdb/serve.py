# backend/showdb/serve.py
"""
Run the API under uvicorn.

Usage (from backend/):
  python -m showdb.serve
  python -m showdb.serve --port 9000 --migrate
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import uvicorn
from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"
_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _ssl_options() -> Dict[str, str]:
    env_to_option = {
        "SSL_CERTFILE": "ssl_certfile",
        "SSL_KEYFILE": "ssl_keyfile",
        "SSL_CA_CERTS": "ssl_ca_certs",
        "SSL_KEYFILE_PASSWORD": "ssl_keyfile_password",
    }
    return {option: os.environ[env] for env, option in env_to_option.items() if os.getenv(env)}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="showdb.serve", description="Run the Showmen Docs API.")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "info"))
    parser.add_argument("--reload", action="store_true", default=_env_flag("RELOAD"))
    parser.add_argument(
        "--migrate",
        action="store_true",
        default=_env_flag("MIGRATE_ON_START"),
        help="Apply pending alembic migrations before serving.",
    )
    return parser


def server_options(args: argparse.Namespace) -> Dict[str, object]:
    options: Dict[str, object] = {
        "host": args.host,
        "port": args.port,
        "reload": args.reload,
        "log_level": args.log_level,
        "proxy_headers": True,
        "forwarded_allow_ips": os.getenv("FORWARDED_ALLOW_IPS", "*"),
    }
    options.update(_ssl_options())
    return options


def run_migrations() -> None:
    logger.info("Applying migrations", extra={"alembic_ini": str(ALEMBIC_INI)})
    command.upgrade(Config(str(ALEMBIC_INI)), "head")


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.migrate:
        run_migrations()
    uvicorn.run("showdb.main:app", **server_options(args))


if __name__ == "__main__":
    main()
