"""CLI entry point and argument parsing"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from config import ConfigError
from config.resolver import resolve_config
from oauth import AuthorizationCodeFlow, OAuthCLIError
from cli.logging_setup import setup_logging

console = Console()
err_console = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
FALSE_VALUES = {"0", "f", "false", "n", "no", "off"}


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


class BoolFlagAction(argparse.BooleanOptionalAction):
    """Boolean flag that stays None unless supplied.

    Accepts ``-flag``, ``-flag=false`` and the negated ``-no-flag`` /
    ``--no-flag`` forms, so a supplied value can switch a setting either
    way regardless of the defaults file.
    """

    def __init__(self, option_strings, dest, default=None, required=False, help=None):
        negated = [f"-no-{option[1:]}" for option in option_strings if not option.startswith("--")]
        super().__init__(option_strings + negated, dest, default=default, required=required, help=help)
        self.nargs = "?"
        self.metavar = "BOOL"

    def __call__(self, parser, namespace, values, option_string=None):
        if option_string is not None and option_string.lstrip("-").startswith("no-"):
            if values is not None:
                raise argparse.ArgumentError(self, f"{option_string} does not take a value")
            value = False
        elif values is None:
            value = True
        else:
            try:
                value = parse_bool(values)
            except ValueError as e:
                raise argparse.ArgumentError(self, str(e))
        setattr(namespace, self.dest, value)


def build_parser() -> argparse.ArgumentParser:
    """Flags mirror the JSON defaults file; every default is None so that
    only flags actually supplied override the file and environment."""
    parser = argparse.ArgumentParser(
        prog="oauth2-cli",
        description="Run a three-legged OAuth2 authorization-code flow from the terminal",
        allow_abbrev=False,
    )
    parser.add_argument("-interface", "--interface", dest="interface", default=None, help="Listening interface")
    parser.add_argument("-port", "--port", dest="port", type=int, default=None, help="Listening port")
    parser.add_argument("-callback", "--callback", dest="callback", default=None, help="Callback URL")
    parser.add_argument("-id", "--id", dest="client_id", default=None, help="Client ID")
    parser.add_argument("-secret", "--secret", dest="client_secret", default=None, help="Client Secret")
    parser.add_argument("-auth", "--auth", dest="auth_url", default=None, help="Provider auth URL")
    parser.add_argument("-token", "--token", dest="token_url", default=None, help="Provider token URL")
    parser.add_argument("-code", "--code", dest="code_param", default=None, help="Query param to read code from")
    parser.add_argument(
        "-scope",
        "--scope",
        dest="scopes",
        action="append",
        default=None,
        help="OAuth scope to authorize (repeatable; values are sent as given)",
    )
    parser.add_argument(
        "-oidc-nonce",
        "--oidc-nonce",
        dest="nonce",
        action=BoolFlagAction,
        help="Include and then validate the OIDC nonce param",
    )
    parser.add_argument(
        "-verbose",
        "--verbose",
        dest="verbose",
        action=BoolFlagAction,
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-offline",
        "--offline",
        dest="offline",
        action=BoolFlagAction,
        help="Request offline access (refresh token); -no-offline disables it",
    )
    parser.add_argument(
        "-auth-style",
        "--auth-style",
        dest="auth_style",
        choices=["params", "header"],
        default=None,
        help="Send client credentials in the form body or an HTTP Basic header",
    )
    parser.add_argument(
        "-timeout",
        "--timeout",
        dest="timeout",
        type=float,
        default=None,
        help="Seconds to wait for the callback (default: wait forever)",
    )
    parser.add_argument(
        "-config",
        "--config",
        dest="config_path",
        default=None,
        help="JSON defaults file (default: /etc/oauth2-cli.json)",
    )
    return parser


def parse_flags(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Parse the command line into config keys (None = not supplied)"""
    return vars(build_parser().parse_args(argv))


def run(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code"""
    flags = parse_flags(argv)
    config_path = flags.pop("config_path")

    setup_logging(verbose=bool(flags.get("verbose")))

    try:
        conf = resolve_config(flags, defaults_path=config_path)
    except ConfigError as e:
        err_console.print(f"[red]ERROR:[/red] {escape(str(e))}", highlight=False)
        return EXIT_FAILURE

    # Verbosity may come from the defaults file or environment
    if conf.verbose:
        setup_logging(verbose=True)

    # stdout carries only the token JSON
    flow = AuthorizationCodeFlow(conf, console=err_console)

    try:
        token = asyncio.run(flow.run())
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted by user[/yellow]")
        return EXIT_INTERRUPTED
    except OAuthCLIError as e:
        err_console.print(f"[red]ERROR:[/red] {escape(str(e))}", highlight=False)
        return EXIT_FAILURE

    console.print(token.to_json(), soft_wrap=True, markup=False, highlight=False)
    return EXIT_OK


def main():
    """Entry point for the CLI"""
    sys.exit(run())


if __name__ == "__main__":
    main()
