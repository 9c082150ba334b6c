from importlib import metadata

from .app import App
from .browser_session import BrowserSession, async_browser_session
from .common import (
    AllowButtonNotFoundError,
    AutomationError,
    BrowserConnectError,
    BrowserLaunchError,
    ClosedPipeError,
    LoginConfig,
    LoginError,
    NoDeviceAuthorizationUrlError,
    PageTimeoutError,
    session_cookie_name,
)
from .credential_store import CredentialStore, SessionCredential
from .status import (
    LoggingStatusReporter,
    NullStatusReporter,
    SpinnerStatusReporter,
    StatusReporter,
)
from .url_extractor import (
    extract_device_authorization_url,
    is_device_authorization_url,
)

# TODO: I really hate this as it uses the installed version which isn't
#   necessarily the one being run => put static version here once tool for
#   https://softwarerecs.stackexchange.com/questions/86673 exists
__version__ = metadata.version(__package__)
__distribution_name__ = metadata.metadata(__package__)["Name"]

__all__ = [
    # app & browser session
    "App",
    "async_browser_session",
    "BrowserSession",
    "LoginConfig",
    # url extraction
    "extract_device_authorization_url",
    "is_device_authorization_url",
    # credential persistence
    "CredentialStore",
    "SessionCredential",
    "session_cookie_name",
    # status reporting
    "StatusReporter",
    "NullStatusReporter",
    "LoggingStatusReporter",
    "SpinnerStatusReporter",
    # exceptions
    "LoginError",
    "NoDeviceAuthorizationUrlError",
    "BrowserLaunchError",
    "BrowserConnectError",
    "PageTimeoutError",
    "ClosedPipeError",
    "AllowButtonNotFoundError",
    "AutomationError",
]
