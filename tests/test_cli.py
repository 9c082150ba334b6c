from pathlib import Path

import pytest
from typer.testing import CliRunner

from aws_federated_headless_login import __distribution_name__, cli
from aws_federated_headless_login.common import LoginConfig
from aws_federated_headless_login.status import LoggingStatusReporter

runner = CliRunner()


class RecordingApp:
    instances: list["RecordingApp"] = []
    exit_code = 0

    def __init__(self, config, reporter, forget=False):
        self.config = config
        self.reporter = reporter
        self.forget = forget
        RecordingApp.instances.append(self)

    def login(self) -> int:
        return self.exit_code


@pytest.fixture
def recording_app(monkeypatch):
    RecordingApp.instances = []
    RecordingApp.exit_code = 0
    monkeypatch.setattr(cli, "App", RecordingApp)
    return RecordingApp


def test_version():
    result = runner.invoke(cli.cli_app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith(__distribution_name__)


def test_defaults(recording_app):
    result = runner.invoke(cli.cli_app, [])
    assert result.exit_code == 0
    (app,) = recording_app.instances
    assert app.config == LoginConfig()
    assert not app.forget
    # output captured by the runner is no terminal => no spinner
    assert isinstance(app.reporter, LoggingStatusReporter)


def test_options(recording_app, tmp_path):
    result = runner.invoke(
        cli.cli_app,
        [
            "--show",
            "--credential-file",
            str(tmp_path / "cred"),
            "--forget",
            "--timeout",
            "5",
            "--max-allow-attempts",
            "10",
        ],
    )
    assert result.exit_code == 0
    (app,) = recording_app.instances
    assert app.config == LoginConfig(
        headless=False,
        credential_path=Path(tmp_path / "cred"),
        timeout=5.0,
        max_allow_poll_attempts=10,
    )
    assert app.forget


def test_options_from_env(recording_app):
    result = runner.invoke(
        cli.cli_app, [], env={"AWSFEDERATEDHEADLESSLOGIN_SHOW": "1"}
    )
    assert result.exit_code == 0
    (app,) = recording_app.instances
    assert not app.config.headless


def test_exit_code_passed_through(recording_app):
    recording_app.exit_code = 1
    result = runner.invoke(cli.cli_app, [])
    assert result.exit_code == 1
