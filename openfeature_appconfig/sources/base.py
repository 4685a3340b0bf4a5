"""
Contract between the provider and a configuration transport.

A source hands back the raw configuration bytes. Sources that talk to the
AppConfigData API need a session token (`requires_session = True`); the
provider's SessionManager creates it with `start_session()` and passes it
to every `fetch_configuration()` call.

Errors are reported with the exceptions in
`openfeature_appconfig.feature_flags.errors`:
    ConfigurationNotFoundError, ThrottledError, SessionExpiredError,
    InvalidParameterError, ConfigurationSourceError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchResult:
    """
    Raw configuration returned by a source.

    Attributes:
        content: JSON payload as bytes
        next_token: Token to use on the next fetch, if the source rotates tokens
    """

    content: bytes
    next_token: str | None = None


class ConfigurationSource(ABC):
    """Base class for configuration transports."""

    requires_session: bool = True

    def start_session(self) -> str:
        """
        Start a configuration session and return its token.

        Sources that do not use sessions return an empty token.
        """
        return ""

    @abstractmethod
    def fetch_configuration(self, token: str) -> FetchResult:
        """Fetch the current configuration payload."""

    def close(self) -> None:
        """Release transport resources."""
