from pathlib import Path

import pytest

from aws_federated_headless_login.common import LoginConfig
from aws_federated_headless_login.credential_store import (
    CredentialStore,
    SessionCredential,
)
from tests.utils_for_tests import (
    RecordingStatusReporter,
    fast_config_kwargs,
    issued_cookie,
)


@pytest.fixture
def credential_path(tmp_path) -> Path:
    return tmp_path / "credential"


@pytest.fixture
def reporter() -> RecordingStatusReporter:
    return RecordingStatusReporter()


@pytest.fixture
def store(credential_path, reporter) -> CredentialStore:
    return CredentialStore(credential_path, reporter)


@pytest.fixture
def config(credential_path) -> LoginConfig:
    return LoginConfig(credential_path=credential_path, **fast_config_kwargs)


@pytest.fixture
def stored_credential(credential_path) -> SessionCredential:
    credential = SessionCredential.from_cookie(
        {**issued_cookie, "value": "previous-session-token"}
    )
    credential_path.write_text(credential.encode())
    return credential
