import asyncio
import os
import signal
import sys
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from logging import Logger, getLogger

from .browser_session import (
    BrowserSession,
    async_browser_session,
    is_closed_pipe_error,
)
from .common import ClosedPipeError, LoginConfig, LoginError
from .credential_store import CredentialStore
from .status import NullStatusReporter, StatusReporter
from .url_extractor import extract_device_authorization_url

default_logger = getLogger(__name__)

BrowserSessionFactory = Callable[
    [LoginConfig, StatusReporter, CredentialStore],
    AbstractAsyncContextManager[BrowserSession],
]


def _exit_silently() -> None:
    # nobody is reading our output anymore, so there is nobody to tell
    # anything either
    os._exit(0)


def install_closed_pipe_listener(loop: asyncio.AbstractEventLoop) -> bool:
    """
    Make the process exit with status 0 as soon as its output pipe is closed.

    Returns:
        Whether the listener could be installed (not possible on platforms
        without ``SIGPIPE``).
    """
    if not hasattr(signal, "SIGPIPE"):
        return False
    loop.add_signal_handler(signal.SIGPIPE, _exit_silently)
    return True


class App:
    def __init__(
        self,
        config: LoginConfig | None = None,
        reporter: StatusReporter = NullStatusReporter(),
        input_lines: Iterable[str] | None = None,
        forget: bool = False,
        session_factory: BrowserSessionFactory = async_browser_session,
        logger: Logger = default_logger,
    ):
        self.config = config if config is not None else LoginConfig()
        self.reporter = reporter
        self.input_lines = (
            input_lines if input_lines is not None else sys.stdin
        )
        self.forget = forget
        self.session_factory = session_factory
        self.logger = logger

    async def _read_url(self) -> str:
        self.reporter.progress("reading url from stdin")
        # in a thread so the event loop can still react to signals meanwhile
        url = await asyncio.get_running_loop().run_in_executor(
            None, extract_device_authorization_url, self.input_lines
        )
        self.logger.info("got device authorization URL %s", url)
        return url

    async def _login(self) -> None:
        url = await self._read_url()
        store = CredentialStore(self.config.credential_path, self.reporter)
        if self.forget:
            store.clear()
        async with self.session_factory(
            self.config, self.reporter, store
        ) as session:
            await session.login(url)

    async def run(self) -> int:
        """
        Perform the whole login and report how it went.

        This is the only place where errors are turned into a final status
        message and exit code.

        Returns:
            The exit code the process should terminate with.
        """
        try:
            await self._login()
        except ClosedPipeError:
            self.logger.debug("output closed - exiting quietly")
            return 0
        except LoginError as e:
            self.reporter.failure(f"Log in failed: {e}")
            return 1
        except Exception as e:
            if is_closed_pipe_error(e):
                return 0
            self.logger.debug("unexpected error", exc_info=True)
            self.reporter.failure(f"Log in failed: {e}")
            return 1
        self.reporter.success("Logged in successfully")
        return 0

    def login(self) -> int:
        """
        Synchronous entry point, also listening for a closed output pipe.

        Can't be called from within a running event loop; use :meth:`run`
        there.
        """

        async def _main() -> int:
            install_closed_pipe_listener(asyncio.get_running_loop())
            return await self.run()

        return asyncio.run(_main())
