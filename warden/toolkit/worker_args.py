"""Module worker_args: inline documentation for warden/toolkit/worker_args.py."""
#
# PURPOSE:
# argparse model of the worker command line, used as the default argv validator.
#
# INTEGRATION:
# - Used by: warden/engine/registry.py, warden/cli.py (`warden validate`)
# - Depends on: warden/errors.py
#

# warden/toolkit/worker_args.py
# Command line schema of the worker executable, used to reject bad argv before spawning.

from __future__ import annotations

import argparse
import logging
from typing import List, NoReturn, Optional, Sequence

from warden.errors import ValidationError

logger = logging.getLogger(__name__)

# Options that make the worker do something other than run one attack session.
FORBIDDEN_OPTIONS = {
    "api": "--api starts another API server instead of a session",
    "list_plugins": "--list-plugins does not start a session",
    "generate_completions": "--generate-completions does not start a session",
}

# Plugin-specific options are namespaced by plugin family, e.g. --http-success,
# --ssh-auth-mode, --dns-resolvers. They are passed through unparsed.
PLUGIN_OPTION_FAMILIES = frozenset({
    "amqp", "cmd", "dns", "http", "imap", "irc", "kerberos", "ldap", "mongodb",
    "mqtt", "oracle", "pop3", "port-scanner", "rdp", "smb", "smtp", "socks5",
    "ssh", "stomp", "telnet", "vnc",
})


class _RaisingArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting."""

    def error(self, message: str) -> NoReturn:
        raise ValidationError(message, details={"usage": self.format_usage().strip()})

    def exit(self, status: int = 0, message: Optional[str] = None) -> NoReturn:
        # -h/--help and --version would otherwise terminate the interpreter
        raise ValidationError(
            (message or "argument vector requested an early exit").strip(),
            details={"status": status},
        )


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def build_worker_parser() -> argparse.ArgumentParser:
    parser = _RaisingArgumentParser(
        prog="worker",
        description="Worker session command line",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("plugin", nargs="?", help="Plugin to run (ssh, http.basic, ...)")

    target = parser.add_argument_group("target")
    target.add_argument("-T", "--target", help="Target host, range or file (@targets.txt)")

    credentials = parser.add_argument_group("credentials")
    credentials.add_argument("-U", "--username", "--payloads", dest="username")
    credentials.add_argument("-P", "--password", "--key", dest="password")
    credentials.add_argument("-C", "--combinations", help="File of user:password combinations")
    credentials.add_argument("--separator", default=":")
    credentials.add_argument("--iterate-by", choices=["user", "password"], default="user")
    credentials.add_argument("-R", "--recipe", help="Recipe file")

    output = parser.add_argument_group("output")
    output.add_argument("-O", "--output")
    output.add_argument("--output-format", choices=["text", "csv", "jsonl"], default="text")
    output.add_argument("-Q", "--quiet", action="store_true")

    tuning = parser.add_argument_group("tuning")
    tuning.add_argument("--concurrency", type=_positive_int)
    tuning.add_argument("--timeout", type=_positive_int, help="Connection timeout in milliseconds")
    tuning.add_argument("--retries", type=_non_negative_int)
    tuning.add_argument("--retry-time", type=_non_negative_int)
    tuning.add_argument("--rate-limit", type=_non_negative_int)
    tuning.add_argument("-W", "--wait", type=_non_negative_int)
    tuning.add_argument("--jitter-min", type=_non_negative_int)
    tuning.add_argument("--jitter-max", type=_non_negative_int)
    tuning.add_argument("--single-match", action="store_true")
    tuning.add_argument("--ulimit", type=_positive_int)

    modes = parser.add_argument_group("modes")
    modes.add_argument("--api", help="Start the worker's own REST API")
    modes.add_argument("-L", "--list-plugins", action="store_true")
    modes.add_argument("-G", "--generate-completions")

    return parser


def _is_plugin_option(token: str) -> bool:
    if not token.startswith("--"):
        return False
    name = token[2:].split("=", 1)[0]
    return any(name.startswith(family + "-") for family in PLUGIN_OPTION_FAMILIES)


def _check_plugin_options(parser: argparse.ArgumentParser, extras: List[str]) -> List[str]:
    """
    Accept leftovers of parse_known_args that are plugin-family options, each
    optionally followed by one value. Anything else is unrecognized.
    """
    accepted: List[str] = []
    rejected: List[str] = []
    expects_value = False
    for token in extras:
        if _is_plugin_option(token):
            accepted.append(token)
            expects_value = "=" not in token
        elif expects_value and not token.startswith("-"):
            accepted.append(token)
            expects_value = False
        else:
            rejected.append(token)
            expects_value = False
    if rejected:
        parser.error(f"unrecognized arguments: {' '.join(rejected)}")
    return accepted


def validate_argv(argv: Sequence[str]) -> argparse.Namespace:
    """
    Check an argument vector (program name excluded) against the worker schema.

    Returns the parsed namespace; plugin-family options land in
    ``plugin_options`` unparsed. Raises ValidationError on unknown options,
    malformed values, missing plugin/target, or options that do not start an
    attack session.
    """
    if isinstance(argv, str) or not all(isinstance(arg, str) for arg in argv):
        raise ValidationError("argv must be a sequence of strings")

    parser = build_worker_parser()
    args, extras = parser.parse_known_args(list(argv))
    args.plugin_options = _check_plugin_options(parser, extras)

    for dest, reason in FORBIDDEN_OPTIONS.items():
        if getattr(args, dest):
            raise ValidationError(reason, details={"option": dest})

    if not args.plugin:
        parser.error("a plugin name is required")
    if not args.target:
        parser.error("the following arguments are required: -T/--target")
    if args.jitter_min is not None and args.jitter_max is not None and args.jitter_min > args.jitter_max:
        parser.error("--jitter-min must not exceed --jitter-max")

    logger.debug(f"Validated worker argv for plugin {args.plugin}: {list(argv)}")
    return args
