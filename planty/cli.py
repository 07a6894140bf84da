import argparse
import logging
import sys

import anyio
import uvicorn

from planty.core.db import get_engine
from planty.core.exceptions import PlantyError
from planty.core.security import CredentialManager
from planty.core.settings import settings, warn_if_default_secret
from planty.core.store import PlantStore
from planty.transports.stdio import resolve_stdio_identity, run_stdio

logger = logging.getLogger("planty")


def _open_store() -> PlantStore:
    store = PlantStore(get_engine())
    store.init_db()
    warn_if_default_secret(logger)
    return store


def cmd_http(args: argparse.Namespace) -> int:
    uvicorn.run(
        "planty.main:app",
        host=args.host,
        port=args.port,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return 0


def cmd_stdio(_args: argparse.Namespace) -> int:
    store = _open_store()
    user_id = resolve_stdio_identity(store, CredentialManager(store), settings)
    anyio.run(run_stdio, store, user_id)
    return 0


def cmd_generate_key(args: argparse.Namespace) -> int:
    store = _open_store()
    issued = CredentialManager(store).create_identity(args.email)
    # stdout is the only place the plaintext key ever goes
    print(f"user id: {issued.user_id}")
    print(f"api key: {issued.api_key}")
    print("Save this API key. You won't be able to see it again.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planty", description="Plant care tracker MCP server")
    subparsers = parser.add_subparsers(dest="command", required=True)

    http_parser = subparsers.add_parser("http", help="Serve the REST api and the MCP SSE transport")
    http_parser.add_argument("--host", default=settings.HOST)
    http_parser.add_argument("--port", type=int, default=settings.PORT)
    http_parser.set_defaults(func=cmd_http)

    stdio_parser = subparsers.add_parser("stdio", help="Serve MCP over stdin/stdout for one user")
    stdio_parser.set_defaults(func=cmd_stdio)

    key_parser = subparsers.add_parser("generate-key", help="Create a user and print its first api key")
    key_parser.add_argument("--email", default=None)
    key_parser.set_defaults(func=cmd_generate_key)

    return parser


def main(argv: list[str] | None = None) -> int:
    # stdout belongs to the stdio transport
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except PlantyError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
