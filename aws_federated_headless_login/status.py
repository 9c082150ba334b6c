from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from logging import Logger, getLogger

from rich.console import Console
from rich.text import Text
from yachalk import chalk

default_logger = getLogger(__name__)


class StatusReporter(ABC):
    """
    Receiver of human-readable messages about the progress of a login.
    """

    @abstractmethod
    def progress(self, message: str) -> None:
        """
        Report what is currently being done (transient, superseded by the
        next message).
        """

    @abstractmethod
    def warning(self, message: str) -> None:
        """
        Report a problem that doesn't prevent the login from continuing.
        """

    @abstractmethod
    def success(self, message: str) -> None:
        """
        Report that the login was completed successfully. Final message.
        """

    @abstractmethod
    def failure(self, message: str) -> None:
        """
        Report that the login failed. Final message.

        Only reports; terminating the process is up to the caller.
        """


class NullStatusReporter(StatusReporter):
    """
    Status reporter that discards all messages.
    """

    def progress(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def failure(self, message: str) -> None:
        pass


class LoggingStatusReporter(StatusReporter):
    """
    Status reporter that turns messages into log records.

    Useful when the output isn't a terminal that could show a spinner.
    """

    def __init__(self, logger: Logger = default_logger):
        self.logger = logger

    def progress(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def success(self, message: str) -> None:
        self.logger.info(message)

    def failure(self, message: str) -> None:
        self.logger.error(message)


class SpinnerStatusReporter(StatusReporter, AbstractContextManager):
    """
    Status reporter showing progress as a spinner in the terminal.

    The spinner runs while the reporter is used as a context manager. Warnings
    are printed above it, success and failure messages stop it.
    """

    def __init__(
        self,
        console: Console | None = None,
        prefix: str = "AWS Identity Center Sign in: ",
    ):
        self.console = console if console is not None else Console()
        self.prefix = prefix
        self._status = self.console.status(Text(prefix), spinner="dots")
        self._running = False

    def __enter__(self) -> "SpinnerStatusReporter":
        self._status.start()
        self._running = True
        return self

    def __exit__(self, *args, **kwargs) -> None:
        self._stop()

    def _stop(self) -> None:
        if self._running:
            self._status.stop()
            self._running = False

    def _print(self, colored: str) -> None:
        self.console.print(Text.from_ansi(colored))

    def progress(self, message: str) -> None:
        self._status.update(Text(self.prefix + message))

    def warning(self, message: str) -> None:
        self._print(self.prefix + "Warn: " + chalk.yellow(message))

    def success(self, message: str) -> None:
        self._stop()
        self._print(chalk.green("✓ ") + self.prefix + chalk.green(message))

    def failure(self, message: str) -> None:
        self._stop()
        self._print(chalk.red("✗ ") + self.prefix + chalk.red(message))
