"""
AppConfig Agent transport using httpx.

The AppConfig Agent runs next to the application (sidecar or local daemon)
and serves the latest configuration over plain HTTP:

    GET {agent_endpoint}/applications/{app}/environments/{env}/configurations/{profile}

No session token is needed; the agent polls AppConfig on its own.

FORK SAFETY:
    The httpx client is created lazily and recreated when the process ID
    changes, so a provider built before a gunicorn fork keeps working in
    the workers.
"""

from __future__ import annotations

import os
import threading

import httpx

from openfeature_appconfig.feature_flags.config import DEFAULT_AGENT_ENDPOINT
from openfeature_appconfig.feature_flags.errors import (
    ConfigurationNotFoundError,
    ConfigurationSourceError,
    ThrottledError,
)

from .base import ConfigurationSource, FetchResult


class AppConfigAgentSource(ConfigurationSource):
    """Fetches configuration from a local AppConfig Agent."""

    requires_session = False

    def __init__(
        self,
        application: str,
        environment: str,
        configuration_profile: str,
        agent_endpoint: str = DEFAULT_AGENT_ENDPOINT,
        timeout_seconds: float = 5.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Create the source.

        Args:
            application: AppConfig application name
            environment: AppConfig environment name
            configuration_profile: AppConfig configuration profile name
            agent_endpoint: Agent base URL
            timeout_seconds: HTTP timeout for each request
            http_client: Pre-built httpx client (tests); never recreated
        """
        self.application = application
        self.environment = environment
        self.configuration_profile = configuration_profile
        self.agent_endpoint = agent_endpoint.rstrip("/")
        self.timeout_seconds = timeout_seconds

        self._injected_client = http_client is not None
        self._http_client = http_client
        self._process_id = os.getpid()
        self._client_lock = threading.Lock()

    @property
    def configuration_url(self) -> str:
        return (
            f"{self.agent_endpoint}/applications/{self.application}"
            f"/environments/{self.environment}"
            f"/configurations/{self.configuration_profile}"
        )

    def _get_http_client(self) -> httpx.Client:
        with self._client_lock:
            current_pid = os.getpid()
            if not self._injected_client and self._process_id != current_pid:
                # Forked: the parent owns the old client's sockets
                self._http_client = None
                self._process_id = current_pid

            if self._http_client is None:
                self._http_client = httpx.Client(timeout=self.timeout_seconds)

            return self._http_client

    def fetch_configuration(self, token: str = "") -> FetchResult:
        url = self.configuration_url
        try:
            response = self._get_http_client().get(
                url,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise ConfigurationSourceError(f"Agent request failed: {e}") from e

        if response.status_code == 404:
            raise ConfigurationNotFoundError(
                f"Agent configuration not found: HTTP 404: {response.text}"
            )
        if response.status_code == 429:
            raise ThrottledError(f"Agent request throttled: HTTP 429: {response.text}")
        if not response.is_success:
            raise ConfigurationSourceError(
                f"Agent HTTP error: HTTP {response.status_code}: {response.text}"
            )

        return FetchResult(content=response.content)

    def close(self) -> None:
        # Injected clients belong to the caller
        if self._injected_client:
            return
        with self._client_lock:
            if self._http_client is not None:
                self._http_client.close()
                self._http_client = None
