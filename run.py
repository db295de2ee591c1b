"""The Alley CLI entry point.

Provides subcommands for running the web server and for seeding the world
from the command line. Accepts configuration via flags and environment
variables, with .env loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import signal
import sys
from textwrap import dedent

from dotenv import load_dotenv

__version__ = "0.1.0"


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    The Alley Game Server

    Run the web server or seed world entities (maps, items, NPCs) directly.
    Configuration can be provided via CLI flags or environment variables. If
    both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                       Bind address for the web server (default: 0.0.0.0)
          PORT                       Port for the web server (default: 5000)
          DATABASE_URL               SQLAlchemy database URI (default: sqlite:///instance/alley.db)
          ALLEY_MAP_GROWTH_LIMIT     Maps are auto-created by move ticks below this count (default: 11)
          ALLEY_SEED_WORLD_ON_START  Seed one map/item/NPC on start when the world is empty

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Bind to localhost only and use a different database
          python run.py server --host 127.0.0.1 --db sqlite:///instance/dev.db

          # Seed three maps, items and NPCs
          python run.py seed --count 3
        """
    )

    parser = argparse.ArgumentParser(
        prog="alley",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"The Alley Server {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the web server",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument(
        "--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)"
    )
    server_parser.add_argument(
        "--db",
        dest="db_uri",
        default=None,
        help="Database URI (default: env DATABASE_URL or sqlite:///instance/alley.db)",
    )
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    seed_parser = subparsers.add_parser(
        "seed",
        help="Seed one map, item and NPC per round",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    seed_parser.add_argument("--count", type=int, default=1, help="Number of seeding rounds (default: 1)")
    seed_parser.add_argument("--db", dest="db_uri", default=None, help="Database URI")
    seed_parser.set_defaults(command="seed")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]
    return parser.parse_args(argv)


def run_seed(rounds: int) -> int:
    from alley import create_app
    from alley.services.world_seeder import WorldSeeder
    from alley.storage import get_storage

    app = create_app()
    failed = 0
    with app.app_context():
        seeder = WorldSeeder(get_storage())
        for n in range(1, rounds + 1):
            report = seeder.initialize_world()
            for kind, result in report.items():
                if result.ok:
                    print(f"[{n}] {kind:<4} id={result.id}")
                else:
                    failed += 1
                    print(f"[{n}] {kind:<4} FAILED: {result.error}")
    return 1 if failed else 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    db_uri_cli = getattr(args, "db_uri", None)

    # DATABASE_URL must be in place BEFORE the app module is imported
    if db_uri_cli:
        os.environ["DATABASE_URL"] = db_uri_cli
    db_banner = db_uri_cli or os.getenv("DATABASE_URL") or "auto (instance/alley.db)"

    mode = (getattr(args, "command", None) or "server").lower()

    from alley.logging_utils import log

    log.info(event="startup", mode=mode, host=host, port=port, db=db_banner)

    if mode == "seed":
        return run_seed(max(args.count, 0))

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    from alley.server import start_server

    divider = "=" * 40
    lines = [
        divider,
        "  The Alley Server Bootup",
        divider,
        f"  {'Host:':12} {host}",
        f"  {'Port:':12} {port}",
        f"  {'Database:':12} {db_banner}",
        divider,
        "",
    ]
    print("\n".join(lines))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
