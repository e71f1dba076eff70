from pathlib import Path
from unittest.mock import Mock

import pytest

from pglaunch.cli.context import CLIContext
from pglaunch.infra.constants import ClusterPaths
from pglaunch.infra.postgres import DbSettings
from pglaunch.infra.postgres.connection import ENV_FIELDS, get_settings
from pglaunch.infra.shell import CommandResult, CommandRunner


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Strip database variables so tests never see the host's settings."""
    for var in [*ENV_FIELDS, "ECHO"]:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app_settings() -> DbSettings:
    """Settings for an application database on a remote server."""
    return DbSettings(
        host="db.internal",
        port=5433,
        user="app",
        password="app-secret",
        name="appdb",
        admin_user="postgres",
        admin_password="root-secret",
    )


def ok_result(stdout: str = "") -> CommandResult:
    return CommandResult(success=True, stdout=stdout, stderr="", returncode=0)


@pytest.fixture
def make_result():
    """Factory for successful CommandResults."""
    return ok_result


@pytest.fixture
def mock_runner():
    """A CommandRunner whose calls succeed with empty output."""
    runner = Mock(spec=CommandRunner)
    runner.run.return_value = ok_result()
    runner.run_checked.return_value = ""
    runner.run_streaming.return_value = ok_result()
    return runner


@pytest.fixture
def cluster_paths(tmp_path: Path) -> ClusterPaths:
    return ClusterPaths(root=tmp_path / "var", lib_root=tmp_path / "lib")


@pytest.fixture
def cli_context(app_settings, mock_runner, cluster_paths):
    """CLIContext with a mocked runner and console."""
    return CLIContext(
        console=Mock(),
        settings=app_settings,
        runner=mock_runner,
        paths=cluster_paths,
    )
