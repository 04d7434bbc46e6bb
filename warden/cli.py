"""
Warden CLI - entrypoint for the session supervisor.

Usage examples:
    warden serve --port 8666
    warden validate -- ssh --target 10.0.0.1:22 -U root -P wordlist.txt
"""

import argparse
import sys

from warden.base.config import get_config, setup_logging
from warden.errors import WardenError
from warden.toolkit.worker_args import validate_argv


def run_server(args: argparse.Namespace) -> int:
    import uvicorn

    from warden.server.api import create_app

    config = get_config()
    setup_logging(config)
    uvicorn.run(
        create_app(),
        host=args.host or config.api_host,
        port=args.port or config.api_port,
        log_config=None,
    )
    return 0


def run_validate(args: argparse.Namespace) -> int:
    try:
        validate_argv(args.argv)
    except WardenError as exc:
        print(f"invalid: {exc.message}", file=sys.stderr)
        return 2
    print("ok")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="warden", description="Worker session supervisor")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: WARDEN_API_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: WARDEN_API_PORT)")
    serve.set_defaults(handler=run_server)

    validate = sub.add_parser("validate", help="Check a worker argument vector")
    validate.add_argument("argv", nargs=argparse.REMAINDER, help="Worker arguments (after --)")
    validate.set_defaults(handler=run_validate)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "argv", None) and args.argv[0] == "--":
        args.argv = args.argv[1:]
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
