"""
Persistence of the identity provider's session cookie between runs.
"""
import json
import os
from base64 import b64decode, b64encode
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from logging import Logger, getLogger
from pathlib import Path
from typing import Any

from .common import credential_filename, session_cookie_name
from .status import NullStatusReporter, StatusReporter

default_logger = getLogger(__name__)

# keys accepted by Playwright's BrowserContext.add_cookies
set_cookie_param_keys = (
    "name",
    "value",
    "domain",
    "path",
    "expires",
    "httpOnly",
    "secure",
    "sameSite",
)


@dataclass
class SessionCredential:
    """
    A single browser cookie proving an authenticated session.
    """

    name: str
    value: str
    attributes: dict[str, Any] = field(default_factory=dict)
    "Remaining cookie attributes (domain, path, expires, ...) as returned"

    @classmethod
    def from_cookie(cls, cookie: Mapping[str, Any]) -> "SessionCredential":
        name = cookie.get("name")
        value = cookie.get("value")
        if not isinstance(name, str) or not isinstance(value, str):
            raise ValueError(f"not a valid cookie: {cookie!r}")
        return cls(
            name,
            value,
            {k: v for k, v in cookie.items() if k not in ("name", "value")},
        )

    def to_cookie(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, **self.attributes}

    def to_set_cookie_param(self) -> dict[str, Any]:
        """
        Convert to a mapping suitable for ``BrowserContext.add_cookies``.

        Attributes the browser wouldn't accept are dropped.

        Raises:
            ValueError: If the credential has no domain, which the browser
                needs to know where to send the cookie.
        """
        if not self.attributes.get("domain"):
            raise ValueError(f"{self.name} cookie has no domain")
        param = {
            k: v
            for k, v in self.to_cookie().items()
            if k in set_cookie_param_keys
        }
        param.setdefault("path", "/")
        return param

    def encode(self) -> str:
        return b64encode(json.dumps(self.to_cookie()).encode()).decode("ascii")

    @classmethod
    def decode(cls, data: str | bytes) -> "SessionCredential":
        """
        Inverse of :meth:`encode`.

        Raises:
            ValueError: If the data isn't an encoded cookie.
        """
        cookie = json.loads(b64decode(data.strip(), validate=True))
        if not isinstance(cookie, Mapping):
            raise ValueError(f"expected a JSON object, got {cookie!r}")
        return cls.from_cookie(cookie)


def _private_opener(path: str, flags: int) -> int:
    # owner-only, the file holds a bearer token
    return os.open(path, flags, 0o600)


def default_credential_path() -> Path:
    """
    Raises:
        RuntimeError: If the user's home directory can't be determined.
    """
    return Path.home() / credential_filename


class CredentialStore:
    """
    Loads and saves the session cookie from/to a single file.

    None of the methods raise on I/O or decoding problems. Those are reported
    as warnings because a run can always fall back to a full login.
    """

    def __init__(
        self,
        path: Path | None = None,
        reporter: StatusReporter = NullStatusReporter(),
        logger: Logger = default_logger,
    ):
        """
        Args:
            path: File to persist the cookie in. ``None`` means a file named
                ``.aws-federated-headless-login`` in the home directory.
            reporter: Receiver of warnings.
            logger: Logger to log details to.
        """
        self.path = path
        self.reporter = reporter
        self.logger = logger

    def _resolve_path(self) -> Path | None:
        if self.path is not None:
            return self.path
        try:
            return default_credential_path()
        except RuntimeError as e:
            self.reporter.warning(f"could not determine home directory: {e}")
            return None

    def load(self) -> SessionCredential | None:
        """
        Load the persisted credential, if any.

        Returns:
            The credential or ``None`` if there is none or it can't be used.
        """
        path = self._resolve_path()
        if path is None:
            return None
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            self.logger.info("no stored credential at %s", path)
            return None
        except OSError as e:
            self.reporter.warning(f"could not read {path}: {e}")
            return None
        try:
            credential = SessionCredential.decode(data)
        except ValueError:
            self.logger.debug("decoding %s failed", path, exc_info=True)
            self.reporter.warning(
                f"error decoding stored credential at {path} - ignoring"
            )
            return None
        if credential.name != session_cookie_name:
            self.reporter.warning(
                f"stored credential at {path} is a {credential.name!r} "
                f"cookie, not {session_cookie_name!r} - ignoring"
            )
            return None
        self.logger.info("loaded stored credential from %s", path)
        return credential

    def save(self, cookies: Iterable[Mapping[str, Any]]) -> bool:
        """
        Persist the session cookie from the given cookies, if there is one.

        Replaces whatever was persisted before.

        Args:
            cookies: All cookies of the browser session.

        Returns:
            Whether a credential was written.
        """
        cookie = next(
            (c for c in cookies if c.get("name") == session_cookie_name), None
        )
        if cookie is None:
            self.logger.info(
                "no %s cookie in browser session - not saving",
                session_cookie_name,
            )
            return False
        path = self._resolve_path()
        if path is None:
            self.reporter.warning(
                f"Failed to save {session_cookie_name} cookie"
            )
            return False
        try:
            encoded = SessionCredential.from_cookie(cookie).encode()
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", opener=_private_opener) as f:
                f.write(encoded)
            # files from before might have been created with looser modes
            path.chmod(0o600)
        except (OSError, ValueError):
            self.logger.debug("writing %s failed", path, exc_info=True)
            self.reporter.warning(
                f"Failed to save {session_cookie_name} cookie"
            )
            return False
        self.logger.info("saved %s cookie to %s", session_cookie_name, path)
        return True

    def clear(self) -> bool:
        """
        Delete the persisted credential.

        Returns:
            Whether there was one to delete.
        """
        path = self._resolve_path()
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            self.reporter.warning(f"could not delete {path}: {e}")
            return False
        self.logger.info("deleted stored credential at %s", path)
        return True
