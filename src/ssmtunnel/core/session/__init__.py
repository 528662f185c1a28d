"""
Session models consumed by the launcher.

The session itself is created upstream (e.g. by a boto3 ``start_session``
call); this package only describes the documents handed to the plugin.
"""

from ssmtunnel.core.session.models import (
    SessionParameters,
    SessionRecord,
    to_wire_json,
)

__all__ = [
    "SessionParameters",
    "SessionRecord",
    "to_wire_json",
]
