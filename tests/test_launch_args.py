"""
Tests for plugin argument assembly.
"""

import json
from unittest.mock import patch

import pytest

from ssmtunnel.core.launch import (
    SESSION_COMMAND,
    LaunchConfig,
    MissingSessionError,
    SessionSerializationError,
    build_session_args,
    serialize_session_params,
    start_session,
)
from ssmtunnel.core.session import SessionParameters, SessionRecord


class TestBuildSessionArgs:
    """Tests for build_session_args function."""

    def test_six_args_in_fixed_order(self, launch_config) -> None:
        args = build_session_args(launch_config)

        assert len(args) == 6
        assert args[1] == "us-east-1"
        assert args[2] == SESSION_COMMAND == "StartSession"
        assert args[3] == "dev"
        assert args[5] == "https://ssm.us-east-1.amazonaws.com"

    def test_session_round_trips(self, launch_config, sample_session) -> None:
        args = build_session_args(launch_config)
        assert SessionRecord.model_validate_json(args[0]) == sample_session

    def test_params_round_trip(self, launch_config, sample_params) -> None:
        args = build_session_args(launch_config)
        assert SessionParameters.model_validate_json(args[4]) == sample_params

    def test_session_uses_wire_names(self, launch_config) -> None:
        session = json.loads(build_session_args(launch_config)[0])
        assert session["SessionId"] == "ABC123"
        assert session["TokenValue"] == "token-value"

    def test_mapping_params(self, sample_session) -> None:
        params = {"Target": "i-0abc", "Parameters": {"portNumber": ["22"]}}
        config = LaunchConfig(session=sample_session, session_params=params)

        args = build_session_args(config)

        assert json.loads(args[4]) == params

    def test_empty_strings_kept_in_position(self, sample_session) -> None:
        config = LaunchConfig(session=sample_session)

        args = build_session_args(config)

        assert args[1] == ""
        assert args[3] == ""
        assert args[5] == ""
        assert args[2] == "StartSession"

    def test_returns_tuple(self, launch_config) -> None:
        assert isinstance(build_session_args(launch_config), tuple)

    def test_missing_session(self) -> None:
        config = LaunchConfig(region="us-east-1")
        with pytest.raises(MissingSessionError, match="active Amazon SSM Session"):
            build_session_args(config)

    def test_missing_session_spawns_nothing(self) -> None:
        config = LaunchConfig(region="us-east-1")
        with patch("ssmtunnel.core.launch.launcher.subprocess.Popen") as mock_popen:
            with pytest.raises(MissingSessionError):
                start_session(config)
        mock_popen.assert_not_called()

    def test_unserializable_params(self, sample_session) -> None:
        config = LaunchConfig(session=sample_session, session_params={"Target": object()})

        with pytest.raises(SessionSerializationError) as exc_info:
            build_session_args(config)

        assert exc_info.value.what == "session parameter"
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_unserializable_session(self) -> None:
        session = SessionRecord.model_validate({"SessionId": "ABC123", "Opaque": object()})
        config = LaunchConfig(session=session)

        with pytest.raises(SessionSerializationError) as exc_info:
            build_session_args(config)

        assert exc_info.value.what == "session"
        assert exc_info.value.__cause__ is not None

    def test_nan_params_mapping_rejected(self, sample_session) -> None:
        config = LaunchConfig(session=sample_session, session_params={"x": float("nan")})

        with pytest.raises(SessionSerializationError) as exc_info:
            build_session_args(config)

        assert exc_info.value.what == "session parameter"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_infinite_params_model_rejected(self, sample_session) -> None:
        params = SessionParameters.model_validate({"Target": "i-0abc", "Weight": float("inf")})
        config = LaunchConfig(session=sample_session, session_params=params)

        with pytest.raises(SessionSerializationError) as exc_info:
            build_session_args(config)

        assert exc_info.value.what == "session parameter"

    def test_nan_session_field_rejected(self) -> None:
        session = SessionRecord.model_validate({"SessionId": "ABC", "Extra": float("nan")})
        config = LaunchConfig(session=session)

        with pytest.raises(SessionSerializationError) as exc_info:
            build_session_args(config)

        assert exc_info.value.what == "session"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_output_is_strict_json(self, launch_config) -> None:
        def reject_constant(token):
            raise AssertionError(f"non-standard JSON token {token}")

        args = build_session_args(launch_config)

        json.loads(args[0], parse_constant=reject_constant)
        json.loads(args[4], parse_constant=reject_constant)


class TestSerializeSessionParams:
    """Tests for serialize_session_params function."""

    def test_model_uses_wire_names(self) -> None:
        text = serialize_session_params(SessionParameters(DocumentName="AWS-StartSSHSession"))
        assert json.loads(text)["DocumentName"] == "AWS-StartSSHSession"

    def test_mapping_is_compact(self) -> None:
        assert serialize_session_params({"Target": "i-0abc"}) == '{"Target":"i-0abc"}'


class TestLaunchConfig:
    """Tests for LaunchConfig defaults."""

    def test_default_plugin_name(self) -> None:
        assert LaunchConfig().resolved_plugin_name == "session-manager-plugin"

    def test_plugin_override(self) -> None:
        config = LaunchConfig(plugin_name="/opt/bin/fake-plugin")
        assert config.resolved_plugin_name == "/opt/bin/fake-plugin"

    def test_default_params_are_empty(self) -> None:
        assert LaunchConfig().session_params == SessionParameters()
