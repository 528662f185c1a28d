"""
Argument assembly for session-manager-plugin.

The plugin takes six positional arguments and reads them by position, so the
order produced here is a wire contract with the plugin.
"""

from __future__ import annotations

from pydantic import BaseModel

from ssmtunnel.core.launch.errors import MissingSessionError, SessionSerializationError
from ssmtunnel.core.launch.models import SESSION_COMMAND, LaunchConfig, ParametersLike
from ssmtunnel.core.session import to_wire_json


def serialize_session_params(params: ParametersLike) -> str:
    """
    Serialize session parameters to compact JSON.

    Accepts either a SessionParameters model (dumped with AWS wire names) or
    a plain mapping.

    Raises:
        SessionSerializationError: If a value cannot be represented in JSON,
            including NaN and infinite floats
    """
    try:
        if isinstance(params, BaseModel):
            return to_wire_json(params.model_dump(by_alias=True))
        return to_wire_json(dict(params))
    except (TypeError, ValueError) as e:
        raise SessionSerializationError("session parameter", e) from e


def build_session_args(config: LaunchConfig) -> tuple[str, ...]:
    """
    Build the positional arguments for session-manager-plugin.

    Args:
        config: Launch configuration with a populated session record

    Returns:
        Tuple of (session JSON, region, "StartSession", profile,
        parameters JSON, endpoint)

    Raises:
        MissingSessionError: If config.session is None
        SessionSerializationError: If the session or parameters can't be encoded

    Examples:
        >>> from ssmtunnel.core.session import SessionRecord
        >>> config = LaunchConfig(
        ...     region="us-east-1",
        ...     profile="dev",
        ...     session=SessionRecord(SessionId="abc"),
        ... )
        >>> build_session_args(config)[2]
        'StartSession'
    """
    if config.session is None:
        raise MissingSessionError()

    # The plugin requires a valid session passed as JSON
    try:
        session_details = config.session.to_json()
    except (TypeError, ValueError) as e:
        raise SessionSerializationError("session", e) from e

    session_parameters = serialize_session_params(config.session_params)

    # Order matters
    return (
        session_details,
        config.region,
        SESSION_COMMAND,
        config.profile,
        session_parameters,
        config.session_endpoint,
    )


__all__ = [
    "build_session_args",
    "serialize_session_params",
]
