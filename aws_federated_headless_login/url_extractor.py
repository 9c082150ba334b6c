"""
Extraction of the device authorization URL from the AWS CLI's output.
"""
import re
from collections.abc import Iterable
from logging import Logger, getLogger

from .common import NoDeviceAuthorizationUrlError

default_logger = getLogger(__name__)

device_authorization_url_re = re.compile(r"^https.*user_code=([A-Z]{4}-?){2}")


def is_device_authorization_url(line: str) -> bool:
    return device_authorization_url_re.match(line) is not None


def extract_device_authorization_url(
    lines: Iterable[str], logger: Logger = default_logger
) -> str:
    """
    Scan lines of text until one of them is a device authorization URL.

    Blocks for as long as the underlying stream does, e.g. when reading from
    a pipe whose writer hasn't printed the URL yet.

    Args:
        lines: Lines of text, e.g. an open text file like ``sys.stdin``.
        logger: Logger to log skipped lines to.

    Returns:
        The first matching line without its line terminator.

    Raises:
        NoDeviceAuthorizationUrlError: If the lines run out before a match.
    """
    for line in lines:
        line = line.rstrip("\r\n")
        if is_device_authorization_url(line):
            return line
        logger.debug("skipping input line %r", line)
    raise NoDeviceAuthorizationUrlError(
        "no device authorization URL found in input"
    )
