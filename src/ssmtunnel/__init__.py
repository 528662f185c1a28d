"""
ssmtunnel - open AWS Systems Manager session tunnels.

Hands an established session to session-manager-plugin and reports whether
the tunnel opened.
"""

__version__ = "0.1.0"

# Re-export core API for convenience
from ssmtunnel.core.launch import (
    LaunchConfig,
    LaunchOutcome,
    LaunchResult,
    LauncherError,
    build_session_args,
    start_session,
)
from ssmtunnel.core.session import SessionParameters, SessionRecord

__all__ = [
    "LaunchConfig",
    "LaunchOutcome",
    "LaunchResult",
    "LauncherError",
    "SessionParameters",
    "SessionRecord",
    "__version__",
    "build_session_args",
    "start_session",
]
