"""
Tests for the structured JSONL event log.
"""

import json
from pathlib import Path

import pytest

from ssmtunnel.utils import EventType, LogEntry, TunnelLogger


def _read_entries(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestTunnelLoggerInit:
    """Tests for TunnelLogger.init."""

    def test_uses_xdg_data_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

        logger = TunnelLogger.init("user-0abc123")

        expected = tmp_path / "data" / "ssmtunnel" / "logs" / "user-0abc123.jsonl"
        assert logger.get_log_file() == expected
        assert expected.parent.is_dir()

    def test_falls_back_to_local_share(self, tmp_path, monkeypatch):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        logger = TunnelLogger.init("abc")

        assert logger.get_log_file() == tmp_path / ".local" / "share" / "ssmtunnel" / "logs" / "abc.jsonl"

    def test_empty_session_id_rejected(self):
        with pytest.raises(ValueError, match="session_id cannot be empty"):
            TunnelLogger.init("")

    def test_path_traversal_stays_in_log_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        log_dir = (tmp_path / "data" / "ssmtunnel" / "logs").resolve()

        logger = TunnelLogger.init("../../escaped")

        assert logger.get_log_file().resolve().parent == log_dir
        assert logger.get_log_file().name == ".._.._escaped.jsonl"

    def test_slashes_do_not_nest_directories(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

        logger = TunnelLogger.init("team/alice session")

        assert logger.get_log_file().name == "team_alice_session.jsonl"
        assert logger.get_log_file().parent == tmp_path / "data" / "ssmtunnel" / "logs"

    @pytest.mark.parametrize("session_id", [".", ".."])
    def test_dot_names_rejected(self, session_id):
        with pytest.raises(ValueError, match="log file name"):
            TunnelLogger.init(session_id)

    def test_unwritable_data_dir_disables_log(self, tmp_path, monkeypatch, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        monkeypatch.setenv("XDG_DATA_HOME", str(blocker))

        logger = TunnelLogger.init("abc")
        logger.log_output("line")

        assert not logger.enabled
        assert "Event log disabled" in caplog.text
        assert blocker.read_text() == ""


class TestTunnelLoggerEvents:
    """Tests for event writing."""

    def test_launch_lifecycle(self, tmp_path):
        logger = TunnelLogger(tmp_path / "logs" / "run.jsonl")

        logger.log_launch_start("session-manager-plugin", "us-east-1", "dev")
        logger.log_output("[session-manager-plugin] Starting session")
        logger.log_launch_end("success", 1.5, pid=4242)

        entries = _read_entries(logger.get_log_file())
        assert [e["event_type"] for e in entries] == [
            "launch_start",
            "plugin_output",
            "launch_end",
        ]
        assert entries[0]["data"] == {
            "plugin": "session-manager-plugin",
            "region": "us-east-1",
            "profile": "dev",
        }
        assert entries[1]["data"] == {"line": "[session-manager-plugin] Starting session"}
        assert entries[2]["data"] == {"outcome": "success", "duration_sec": 1.5, "pid": 4242}

    def test_launch_end_without_pid(self, tmp_path):
        logger = TunnelLogger(tmp_path / "run.jsonl")

        logger.log_launch_end("indeterminate", 0.2)

        assert _read_entries(logger.get_log_file())[0]["data"] == {
            "outcome": "indeterminate",
            "duration_sec": 0.2,
        }

    def test_log_error_with_context(self, tmp_path):
        logger = TunnelLogger(tmp_path / "run.jsonl")

        logger.log_error("boom", {"error_type": "PluginCrashedError"})
        logger.log_error("bare")

        entries = _read_entries(logger.get_log_file())
        assert entries[0]["data"] == {"message": "boom", "context": {"error_type": "PluginCrashedError"}}
        assert entries[1]["data"] == {"message": "bare"}

    def test_sink_records_plugin_output(self, tmp_path):
        logger = TunnelLogger(tmp_path / "run.jsonl")
        sink = logger.sink()

        sink("first")
        sink("second")

        entries = _read_entries(logger.get_log_file())
        assert [e["data"]["line"] for e in entries] == ["first", "second"]
        assert all(e["event_type"] == EventType.PLUGIN_OUTPUT.value for e in entries)

    def test_entries_parse_as_log_entry(self, tmp_path):
        logger = TunnelLogger(tmp_path / "run.jsonl")
        logger.log_output("line")

        raw = logger.get_log_file().read_text().splitlines()[0]
        entry = LogEntry.model_validate_json(raw)

        assert entry.event_type == EventType.PLUGIN_OUTPUT.value
        assert entry.timestamp.tzinfo is not None

    def test_write_failure_warns_once(self, tmp_path, capsys, caplog):
        logger = TunnelLogger(tmp_path / "run.jsonl")
        logger.log_file = tmp_path  # a directory can't be opened for append

        logger.log_output("first")
        logger.log_output("second")

        warnings = [r for r in caplog.records if "Failed to write to event log" in r.getMessage()]
        assert len(warnings) == 1
        assert not logger.enabled
        assert capsys.readouterr().out == ""
