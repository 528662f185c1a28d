"""
Configuration data models for ssmtunnel.

These models define the structure of .ssmtunnel.json and
~/.config/ssmtunnel/config.json files, with validation via Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TunnelConfig(BaseModel):
    """
    Top-level ssmtunnel configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TunnelConfig(region="us-east-1", timeout_seconds=30)
        >>> config.plugin_name
        'session-manager-plugin'
    """
    region: str = Field(
        default="",
        description="AWS region of the session (passed to the plugin)"
    )
    profile: str = Field(
        default="",
        description="AWS profile name (passed to the plugin)"
    )
    session_endpoint: str = Field(
        default="",
        description="SSM endpoint override, e.g. https://ssm.us-east-1.amazonaws.com"
    )
    plugin_name: str = Field(
        default="session-manager-plugin",
        description="Plugin executable name or path"
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Give up if the tunnel hasn't opened after this many seconds"
    )
    log_events: bool = Field(
        default=True,
        description="Write launch events to the JSONL event log"
    )

    @field_validator("plugin_name")
    @classmethod
    def validate_plugin_name(cls, v: str) -> str:
        """Reject a blank plugin name; leave it unset to use the default."""
        if not v.strip():
            raise ValueError("plugin_name cannot be blank")
        return v.strip()
