"""
Session data models for ssmtunnel.

These models mirror the JSON documents exchanged with AWS Systems Manager:
the StartSession response (the session record) and the StartSession request
(the session parameters). Field names follow the AWS wire names through
aliases so that serialized output is accepted by session-manager-plugin as-is.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def to_wire_json(data: Any) -> str:
    """
    Encode a document as compact JSON for session-manager-plugin.

    NaN and infinity have no JSON form and are rejected rather than written
    as bare tokens or replaced with null.

    Raises:
        ValueError: If a float is NaN or infinite
        TypeError: If a value is not JSON serializable
    """
    return json.dumps(data, allow_nan=False, separators=(",", ":"))


class SessionRecord(BaseModel):
    """
    An established Systems Manager session.

    Returned by the upstream StartSession call and treated as opaque apart
    from the session identifier. Unknown keys are preserved so that the
    plugin receives exactly what the service returned.

    Example:
        >>> record = SessionRecord(SessionId="user-0abc", TokenValue="tok")
        >>> record.session_id
        'user-0abc'
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    session_id: str = Field(
        ...,
        alias="SessionId",
        min_length=1,
        description="Unique identifier of the session",
    )
    stream_url: Optional[str] = Field(
        default=None,
        alias="StreamUrl",
        description="WebSocket URL the plugin connects to",
    )
    token_value: Optional[str] = Field(
        default=None,
        alias="TokenValue",
        description="Token used to authenticate the stream connection",
    )

    def to_json(self) -> str:
        """Serialize using AWS wire names."""
        return to_wire_json(self.model_dump(by_alias=True))


class SessionParameters(BaseModel):
    """
    Parameters used to request a session.

    Free-form apart from the well-known StartSession keys; any other key is
    carried through unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    target: Optional[str] = Field(
        default=None,
        alias="Target",
        description="Managed instance the session connects to",
    )
    document_name: Optional[str] = Field(
        default=None,
        alias="DocumentName",
        description="SSM document to run (e.g. AWS-StartPortForwardingSession)",
    )
    parameters: dict[str, list[str]] = Field(
        default_factory=dict,
        alias="Parameters",
        description="Document parameters, each a list of string values",
    )
    reason: Optional[str] = Field(
        default=None,
        alias="Reason",
        description="Reason recorded for the session",
    )

    def to_json(self) -> str:
        """Serialize using AWS wire names."""
        return to_wire_json(self.model_dump(by_alias=True))

    @classmethod
    def from_pairs(
        cls,
        pairs: list[str],
        *,
        target: Optional[str] = None,
        document_name: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> "SessionParameters":
        """
        Build parameters from KEY=VALUE strings.

        Repeated keys accumulate values in order.

        Raises:
            ValueError: If an entry is not in KEY=VALUE form
        """
        parameters: dict[str, list[str]] = {}
        for pair in pairs:
            if "=" not in pair:
                raise ValueError(f"parameter must be in KEY=VALUE format: {pair}")
            key, value = pair.split("=", 1)
            key = key.strip()
            if not key:
                raise ValueError(f"parameter name cannot be empty: {pair}")
            parameters.setdefault(key, []).append(value)

        data: dict[str, Any] = {"Parameters": parameters}
        if target is not None:
            data["Target"] = target
        if document_name is not None:
            data["DocumentName"] = document_name
        if reason is not None:
            data["Reason"] = reason
        return cls.model_validate(data)


__all__ = [
    "SessionParameters",
    "SessionRecord",
    "to_wire_json",
]
