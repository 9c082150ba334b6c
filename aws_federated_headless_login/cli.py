import logging
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from . import __distribution_name__, __version__
from .app import App
from .common import LoginConfig
from .status import (
    LoggingStatusReporter,
    SpinnerStatusReporter,
    StatusReporter,
)

cli_app = typer.Typer(
    context_settings={
        "auto_envvar_prefix": "AWSFEDERATEDHEADLESSLOGIN",
    }
)


# Typer's idiom for implementing --version... don't even ask.
# https://typer.tiangolo.com/tutorial/options/version/
def version_callback(value: bool):
    if value:
        print(f"{__distribution_name__} {__version__}")
        raise typer.Exit()


def _make_reporter(
    console: Console,
) -> AbstractContextManager[StatusReporter]:
    # a spinner makes no sense if nobody is watching
    if console.is_terminal:
        return SpinnerStatusReporter(console)
    return nullcontext(LoggingStatusReporter())


@cli_app.command()
def login(
    show: bool = typer.Option(
        False, help="Show the browser (disable headless mode)."
    ),
    credential_file: str = typer.Option(
        None,
        metavar="PATH",
        help="File to persist the session cookie in "
        "(default: ~/.aws-federated-headless-login).",
    ),
    forget: bool = typer.Option(
        False,
        help="Delete the persisted session cookie before logging in, "
        "forcing a full login.",
    ),
    timeout: float = typer.Option(
        30.0,
        metavar="SECONDS",
        help="How long to wait for pages and buttons before giving up.",
    ),
    max_allow_attempts: Optional[int] = typer.Option(
        None,
        min=1,
        help="Give up if the Allow button hasn't shown up after this many "
        "attempts (one every 500 ms); waits forever if not set.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Verbose output (repeat to increases verbosity, e.g. -vv, -vvv).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        help="Print version information and exit.",
        is_eager=True,
    ),
):
    """
    Complete an AWS IAM Identity Center device authorization in a browser.

    Reads the output of e.g. `aws sso login --no-browser` from standard input
    and confirms the authorization request found in it.
    """
    # it seems that there is no way around setting global state with Python's
    # own logging module, so setting this up is done in the outermost layer
    # here (=> everything inside has no global state mutations)
    logging.basicConfig(
        level={
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG,
            3: logging.NOTSET,
        }.get(verbose, 3)
    )
    config = LoginConfig(
        headless=not show,
        credential_path=(
            Path(credential_file) if credential_file is not None else None
        ),
        timeout=timeout,
        max_allow_poll_attempts=max_allow_attempts,
    )
    with _make_reporter(Console()) as reporter:
        exit_code = App(config, reporter, forget=forget).login()
    raise typer.Exit(exit_code)


def cli_main():
    cli_app()


if __name__ == "__main__":
    cli_main()
