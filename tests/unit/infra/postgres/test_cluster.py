"""Tests for cluster bootstrap."""

import signal
from pathlib import Path
from unittest.mock import Mock

import pytest

from pglaunch.infra.constants import CREATECLUSTER_BIN, LOCALE_GEN_BIN, OWN_VOLUME_BIN
from pglaunch.infra.errors import ExternalToolError, PreconditionError
from pglaunch.infra.postgres import ConnectionDescriptor, DbSettings, PostgresCluster


@pytest.fixture
def settings():
    return DbSettings(
        admin_user="postgres",
        admin_password="root'pw",
        locale="en_US.UTF-8",
        extensions="hstore,pg_trgm",
    )


@pytest.fixture
def cluster(mock_runner, settings, cluster_paths):
    return PostgresCluster(mock_runner, settings, cluster_paths, Mock())


def _streamed(mock_runner) -> list[list[str]]:
    return [c.args[0] for c in mock_runner.run_streaming.call_args_list]


def _single_user_inputs(mock_runner) -> list[tuple[str, str]]:
    """(database, sql) for each single-user invocation."""
    return [
        (c.args[0][-1], c.kwargs["input"])
        for c in mock_runner.run_checked.call_args_list
        if "--single" in c.args[0]
    ]


def _fake_createcluster(paths, seen_passwords):
    def run_streaming(cmd, **kwargs):
        if cmd[0] == CREATECLUSTER_BIN:
            pwfile = Path(cmd[-1].split("=", 1)[1])
            seen_passwords.append(pwfile.read_text())
            paths.config_dir.mkdir(parents=True)
            paths.data_dir.mkdir(parents=True)
            paths.pg_hba_conf.write_text("local all all peer\n")
            paths.postgresql_conf.write_text("port = 5432\n")
        return Mock(success=True)

    return run_streaming


def test_ensure_locale_generates_missing_locale(cluster, mock_runner):
    mock_runner.run_checked.return_value = "C\nPOSIX\n"

    cluster.ensure_locale()

    assert _streamed(mock_runner) == [["sudo", LOCALE_GEN_BIN, "en_US.UTF-8"]]


def test_ensure_locale_skips_available_locale(cluster, mock_runner):
    mock_runner.run_checked.return_value = "C\nen_US.UTF-8\n"

    cluster.ensure_locale()

    mock_runner.run_streaming.assert_not_called()


def test_create_builds_cluster_and_opens_remote_access(cluster, mock_runner, cluster_paths):
    passwords: list[str] = []
    mock_runner.run_streaming.side_effect = _fake_createcluster(cluster_paths, passwords)

    cluster.create()

    cmd = _streamed(mock_runner)[0]
    assert cmd[:-1] == [
        CREATECLUSTER_BIN,
        "-u",
        "postgres",
        "--locale=en_US.UTF-8",
        "9.3",
        "main",
        "--",
        "-U",
        "postgres",
    ]
    assert passwords == ["root'pw\n"]
    # The password file does not outlive cluster creation
    assert not Path(cmd[-1].split("=", 1)[1]).exists()
    assert cluster_paths.pg_hba_conf.read_text().endswith("host all all 0.0.0.0/0 md5\n")
    assert cluster_paths.postgresql_conf.read_text().endswith("listen_addresses='*'\n")


def test_create_failure_removes_partial_cluster(cluster, mock_runner, cluster_paths):
    def failing(cmd, **kwargs):
        cluster_paths.data_dir.mkdir(parents=True)
        raise ExternalToolError(cmd, 1, "initdb: error")

    mock_runner.run_streaming.side_effect = failing

    with pytest.raises(ExternalToolError):
        cluster.create()

    assert not cluster_paths.data_dir.exists()
    assert not cluster_paths.config_dir.exists()


def test_create_requires_admin_password(mock_runner, cluster_paths):
    cluster = PostgresCluster(mock_runner, DbSettings(), cluster_paths, Mock())

    with pytest.raises(PreconditionError):
        cluster.create()

    mock_runner.run_streaming.assert_not_called()


def test_ensure_new_cluster(cluster, mock_runner, cluster_paths):
    mock_runner.run_checked.return_value = "en_US.UTF-8\n"
    mock_runner.run_streaming.side_effect = _fake_createcluster(cluster_paths, [])

    cluster.ensure()

    streamed = _streamed(mock_runner)
    assert streamed[0] == ["sudo", OWN_VOLUME_BIN]
    assert streamed[1][0] == CREATECLUSTER_BIN
    assert _single_user_inputs(mock_runner) == [
        ("template1", 'CREATE EXTENSION IF NOT EXISTS "hstore"'),
        ("template1", 'CREATE EXTENSION IF NOT EXISTS "pg_trgm"'),
    ]


def test_ensure_existing_cluster_updates_admin_password(cluster, mock_runner, cluster_paths):
    cluster_paths.data_dir.mkdir(parents=True)
    mock_runner.run_checked.return_value = "en_US.UTF-8\n"

    cluster.ensure()

    assert CREATECLUSTER_BIN not in [cmd[0] for cmd in _streamed(mock_runner)]
    assert _single_user_inputs(mock_runner)[0] == (
        "postgres",
        "ALTER USER \"postgres\" WITH PASSWORD 'root''pw';",
    )


def test_boot_provisions_app_and_execs_server(cluster, mock_runner, cluster_paths):
    cluster_paths.data_dir.mkdir(parents=True)
    mock_runner.run_checked.return_value = "en_US.UTF-8\n"
    app = ConnectionDescriptor(user="app", password="pw", name="appdb")

    cluster.boot(app)

    statements = [sql for _, sql in _single_user_inputs(mock_runner)]
    assert "CREATE ROLE \"app\" WITH LOGIN PASSWORD 'pw' VALID UNTIL 'infinity'" in statements
    assert 'CREATE DATABASE "appdb" OWNER="app"' in statements
    mock_runner.replace_process.assert_called_once_with(
        [
            str(cluster_paths.postgres_bin),
            "-c",
            f"config_file={cluster_paths.postgresql_conf}",
        ]
    )


def test_boot_server_only_skips_provisioning(cluster, mock_runner, cluster_paths):
    cluster_paths.data_dir.mkdir(parents=True)
    mock_runner.run_checked.return_value = "en_US.UTF-8\n"

    cluster.boot(None)

    statements = [sql for _, sql in _single_user_inputs(mock_runner)]
    assert not any(s.startswith("CREATE ROLE") for s in statements)
    mock_runner.replace_process.assert_called_once()


def test_boot_failure_removes_stale_pid(cluster, mock_runner, cluster_paths):
    cluster_paths.data_dir.mkdir(parents=True)
    cluster_paths.pid_file.write_text("123\n")
    mock_runner.run_streaming.side_effect = ExternalToolError(["sudo"], 1)

    with pytest.raises(ExternalToolError):
        cluster.boot(None)

    assert not cluster_paths.pid_file.exists()
    mock_runner.replace_process.assert_not_called()


def test_sigterm_during_create_removes_partial_cluster(cluster, mock_runner, cluster_paths):
    mock_runner.run_checked.return_value = "en_US.UTF-8\n"

    def terminated(cmd, **kwargs):
        if cmd[0] == CREATECLUSTER_BIN:
            cluster_paths.config_dir.mkdir(parents=True)
            cluster_paths.data_dir.mkdir(parents=True)
            signal.raise_signal(signal.SIGTERM)
        return Mock(success=True)

    mock_runner.run_streaming.side_effect = terminated
    previous = signal.getsignal(signal.SIGTERM)

    with pytest.raises(SystemExit) as excinfo:
        cluster.boot(None)

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert not cluster_paths.data_dir.exists()
    assert not cluster_paths.config_dir.exists()
    mock_runner.replace_process.assert_not_called()
    assert signal.getsignal(signal.SIGTERM) == previous


def test_boot_restores_sigterm_handler_before_exec(cluster, mock_runner, cluster_paths):
    cluster_paths.data_dir.mkdir(parents=True)
    mock_runner.run_checked.return_value = "en_US.UTF-8\n"
    previous = signal.getsignal(signal.SIGTERM)
    handlers = []
    mock_runner.replace_process.side_effect = (
        lambda cmd, **kwargs: handlers.append(signal.getsignal(signal.SIGTERM))
    )

    cluster.boot(None)

    assert handlers == [previous]
