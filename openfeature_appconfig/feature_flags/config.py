"""
Provider configuration.

ENVIRONMENT VARIABLES:
    APPCONFIG_APPLICATION: AppConfig application identifier (required)
    APPCONFIG_ENVIRONMENT: AppConfig environment identifier (required)
    APPCONFIG_CONFIGURATION_PROFILE: Configuration profile identifier (required)
    APPCONFIG_MODE: "direct_sdk" or "agent" (default: direct_sdk)
    APPCONFIG_AGENT_ENDPOINT: Agent base URL (default: http://localhost:2772)
    APPCONFIG_AGENT_TIMEOUT_SECONDS: Agent HTTP timeout (default: 5)
    APPCONFIG_ENDPOINT_URL: Custom AWS endpoint, e.g. LocalStack (optional)
    AWS_REGION / AWS_DEFAULT_REGION: AWS region (default: us-east-1)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .errors import ProviderConfigurationError

DEFAULT_REGION = "us-east-1"
DEFAULT_AGENT_ENDPOINT = "http://localhost:2772"
DEFAULT_AGENT_TIMEOUT_SECONDS = 5.0


class ProviderMode(str, Enum):
    DIRECT_SDK = "direct_sdk"
    AGENT = "agent"


def _safe_float(value, default):
    """Safely convert a value to float, returning default on failure."""
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


@dataclass(frozen=True)
class ProviderConfig:
    """
    Settings for an AppConfigProvider.

    Attributes:
        application: AppConfig application identifier
        environment: AppConfig environment identifier
        configuration_profile: AppConfig configuration profile identifier
        mode: Transport to use (direct_sdk or agent)
        region: AWS region (direct_sdk mode)
        endpoint_url: Custom AWS endpoint (direct_sdk mode, LocalStack)
        agent_endpoint: Agent base URL (agent mode)
        agent_timeout_seconds: Agent HTTP timeout (agent mode)
    """

    application: str = ""
    environment: str = ""
    configuration_profile: str = ""
    mode: ProviderMode = ProviderMode.DIRECT_SDK
    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    agent_endpoint: str = DEFAULT_AGENT_ENDPOINT
    agent_timeout_seconds: float = DEFAULT_AGENT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, **overrides: Any) -> ProviderConfig:
        """
        Read configuration from environment variables.

        Keyword arguments override the environment, e.g.
        ProviderConfig.from_env(mode="agent").

        Raises:
            ProviderConfigurationError: If the result is invalid
        """
        config = cls(
            application=os.getenv("APPCONFIG_APPLICATION", ""),
            environment=os.getenv("APPCONFIG_ENVIRONMENT", ""),
            configuration_profile=os.getenv("APPCONFIG_CONFIGURATION_PROFILE", ""),
            mode=os.getenv("APPCONFIG_MODE", ProviderMode.DIRECT_SDK.value),
            region=(
                os.getenv("AWS_REGION")
                or os.getenv("AWS_DEFAULT_REGION")
                or DEFAULT_REGION
            ),
            endpoint_url=os.getenv("APPCONFIG_ENDPOINT_URL") or None,
            agent_endpoint=os.getenv("APPCONFIG_AGENT_ENDPOINT", DEFAULT_AGENT_ENDPOINT),
            agent_timeout_seconds=_safe_float(
                os.getenv("APPCONFIG_AGENT_TIMEOUT_SECONDS"),
                DEFAULT_AGENT_TIMEOUT_SECONDS,
            ),
        )
        if overrides:
            config = replace(config, **overrides)
        return config.validate()

    def validate(self) -> ProviderConfig:
        """
        Check required settings and normalize the mode.

        Returns:
            The validated config (mode converted to ProviderMode)
        """
        for name in ("application", "environment", "configuration_profile"):
            if not getattr(self, name):
                raise ProviderConfigurationError(f"{name} is required")

        try:
            mode = ProviderMode(self.mode)
        except ValueError:
            supported = ", ".join(m.value for m in ProviderMode)
            raise ProviderConfigurationError(
                f"Invalid mode: {self.mode}. Supported modes: {supported}"
            ) from None

        return replace(self, mode=mode)
