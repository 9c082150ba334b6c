"""
Constants and exceptions shared by all parts of the login automation.
"""
from dataclasses import dataclass
from pathlib import Path

session_cookie_name = "x-amz-sso_authn"
credential_filename = ".aws-federated-headless-login"

confirm_button_label = "Confirm and continue"
allow_button_label = "Allow"

closed_pipe_error_text = "write on closed pipe"


class LoginError(Exception):
    pass


class NoDeviceAuthorizationUrlError(LoginError):
    pass


class BrowserLaunchError(LoginError):
    pass


class BrowserConnectError(LoginError):
    pass


class PageTimeoutError(LoginError):
    def __init__(self, message: str = "Timed out waiting for page"):
        super().__init__(message)


class ClosedPipeError(LoginError):
    """
    Output of the process was closed by whoever was reading it.

    Not really an error from the user's point of view, so it leads to a
    silent exit with status 0.
    """


class AllowButtonNotFoundError(LoginError):
    pass


class AutomationError(LoginError):
    pass


@dataclass(frozen=True)
class LoginConfig:
    headless: bool = True
    "Run the browser without a visible window"
    credential_path: Path | None = None
    "Where to persist the session cookie (``None`` = in home directory)"
    timeout: float = 30.0
    "Deadline in seconds for navigation and element waits"
    settle_delay: float = 1.0
    "Pause in seconds after clicking the confirmation button"
    allow_poll_interval: float = 0.5
    "Interval in seconds between attempts to find the allow button"
    max_allow_poll_attempts: int | None = None
    "Give up looking for the allow button after this many attempts"
