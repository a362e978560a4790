"""Tests for the server bootstrap helpers."""

import os
import socket

import pytest

from greeter.errors import TransportError
from greeter.main import bind_socket, build_settings, load_env_file, parse_args, run


@pytest.fixture
def busy_port():
    """A listening socket on 127.0.0.1; yields its port."""
    occupied = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    occupied.bind(("127.0.0.1", 0))
    occupied.listen(1)
    try:
        yield occupied.getsockname()[1]
    finally:
        occupied.close()


def test_bind_socket_on_free_port():
    """Binding port 0 picks a free port on the requested host."""
    sock = bind_socket("127.0.0.1", 0)
    try:
        host, port = sock.getsockname()
        assert host == "127.0.0.1"
        assert port > 0
    finally:
        sock.close()


def test_bind_socket_busy_port_raises_transport_error(busy_port):
    """A port already in use raises TransportError."""
    with pytest.raises(TransportError, match=f"cannot listen on 127.0.0.1:{busy_port}"):
        bind_socket("127.0.0.1", busy_port)


def test_run_exits_with_status_1_when_port_is_busy(monkeypatch, tmp_path, busy_port):
    """run() logs the bind failure and exits with status 1."""
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        run(["--host", "127.0.0.1", "--port", str(busy_port), "--env-file", str(tmp_path / "missing.env")])
    assert excinfo.value.code == 1


def test_run_warns_when_env_file_missing(monkeypatch, tmp_path, busy_port, capsys):
    """A missing env file is logged as a warning and startup carries on to the bind."""
    monkeypatch.chdir(tmp_path)
    missing = tmp_path / "missing.env"
    with pytest.raises(SystemExit) as excinfo:
        run(["--host", "127.0.0.1", "--port", str(busy_port), "--env-file", str(missing)])
    # Exit comes from the busy port, after the warning
    assert excinfo.value.code == 1

    out = capsys.readouterr().out
    warning_lines = [line for line in out.splitlines() if "Environment file not loaded" in line]
    assert warning_lines
    assert str(missing) in warning_lines[0]
    assert "warning" in warning_lines[0]


def test_run_exits_with_status_1_on_invalid_log_level(monkeypatch, tmp_path, busy_port):
    """An unknown --log-level is a config error: logged, then exit status 1."""
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        run([
            "--host", "127.0.0.1",
            "--port", str(busy_port),
            "--log-level", "verbose",
            "--env-file", str(tmp_path / "missing.env"),
        ])
    assert excinfo.value.code == 1


def test_load_env_file_missing_is_not_fatal(tmp_path):
    """A missing env file is reported as not loaded."""
    assert load_env_file(tmp_path / "nope.env") is False


def test_load_env_file_does_not_override_existing(monkeypatch, tmp_path):
    """Variables from the env file never replace ones already set."""
    monkeypatch.setenv("GREETER_DOTENV_NEW", "")
    monkeypatch.delenv("GREETER_DOTENV_NEW")
    monkeypatch.setenv("GREETER_DOTENV_SET", "from-env")
    env_file = tmp_path / ".env"
    env_file.write_text("GREETER_DOTENV_NEW=from-file\nGREETER_DOTENV_SET=from-file\n")

    assert load_env_file(env_file) is True
    assert os.environ["GREETER_DOTENV_NEW"] == "from-file"
    assert os.environ["GREETER_DOTENV_SET"] == "from-env"


def test_cli_flags_override_settings(monkeypatch, tmp_path):
    """--host, --port and --log-level win over the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PORT", "8123")
    settings = build_settings(
        parse_args(["--host", "127.0.0.1", "--port", "9100", "--log-level", "debug"])
    )
    assert settings.host == "127.0.0.1"
    assert settings.port == 9100
    assert settings.logging.level == "debug"


def test_port_defaults_to_environment(monkeypatch, tmp_path):
    """Without --port the PORT variable is used."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PORT", "8123")
    settings = build_settings(parse_args([]))
    assert settings.port == 8123


def test_invalid_cli_port_rejected(monkeypatch, tmp_path):
    """--port 0 fails validation."""
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError, match="port must be between"):
        build_settings(parse_args(["--port", "0"]))


def test_invalid_cli_log_level_rejected(monkeypatch, tmp_path):
    """--log-level goes through the same validation as the config file."""
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError, match="logging.level must be one of"):
        build_settings(parse_args(["--log-level", "verbose"]))
