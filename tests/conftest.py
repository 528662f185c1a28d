"""
Pytest configuration and shared fixtures.

Provides isolated config/data directories, sample session records, and a
factory for fake session-manager-plugin executables.
"""

import stat
import sys
import textwrap

import pytest

from ssmtunnel.core.config import clear_cache
from ssmtunnel.core.launch import LaunchConfig
from ssmtunnel.core.session import SessionParameters, SessionRecord

# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """
    Keep every test away from the real user config, data dir, and AWS env.

    Runs each test from an empty working directory with XDG paths under
    tmp_path and the config cache cleared.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / "data"))
    for key in (
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "AWS_PROFILE",
        "SSMTUNNEL_ENDPOINT",
        "SSMTUNNEL_PLUGIN",
        "SSMTUNNEL_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)

    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def sample_session():
    """Provide a populated session record."""
    return SessionRecord(
        SessionId="ABC123",
        StreamUrl="wss://ssmmessages.us-east-1.amazonaws.com/v1/data-channel/ABC123",
        TokenValue="token-value",
    )


@pytest.fixture
def sample_params():
    """Provide port-forwarding session parameters."""
    return SessionParameters(
        Target="i-0123456789abcdef0",
        DocumentName="AWS-StartPortForwardingSession",
        Parameters={"portNumber": ["22"], "localPortNumber": ["2222"]},
    )


@pytest.fixture
def launch_config(sample_session, sample_params):
    """Provide a launch config with every field populated."""
    return LaunchConfig(
        region="us-east-1",
        profile="dev",
        session=sample_session,
        session_params=sample_params,
        session_endpoint="https://ssm.us-east-1.amazonaws.com",
    )


# ==============================================================================
# Fake Plugin Fixtures
# ==============================================================================


@pytest.fixture
def fake_plugin(tmp_path):
    """
    Factory for fake plugin executables.

    The body is Python source run with the current interpreter; `sys`,
    `json` and `time` are already imported. Returns the executable's path.

    Example:
        plugin = fake_plugin('''
            print("opened for sessionId ABC123", flush=True)
        ''')
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    counter = {"n": 0}

    def _make(body: str, name: str | None = None) -> str:
        counter["n"] += 1
        path = bin_dir / (name or f"fake-plugin-{counter['n']}")
        script = f"#!{sys.executable}\nimport json\nimport sys\nimport time\n"
        path.write_text(script + textwrap.dedent(body))
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def running_processes():
    """Collect processes started by a test and kill any left running."""
    processes = []
    yield processes
    for process in processes:
        if process is not None and process.poll() is None:
            process.kill()
            process.wait()

