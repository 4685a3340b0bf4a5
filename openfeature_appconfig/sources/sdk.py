"""
AppConfigData transport using boto3.

USAGE:
    source = AppConfigDataSource(
        application="my-application",
        environment="production",
        configuration_profile="feature-flags",
        region="us-east-1",
    )
    token = source.start_session()
    result = source.fetch_configuration(token)

HOW IT WORKS:
    1. start_configuration_session() returns an initial token
    2. get_latest_configuration(token) returns the payload and the token
       for the next poll
    3. When nothing changed since the last poll, AppConfigData sends an
       empty payload. The last non-empty payload is served in that case.

ERROR MAPPING (botocore ClientError code):
    ResourceNotFoundException                       -> ConfigurationNotFoundError
    ThrottlingException                             -> ThrottledError
    BadRequestException / InvalidParameterException -> SessionExpiredError when the
                                                       message mentions an expired
                                                       session, InvalidParameterError
                                                       otherwise
    anything else                                   -> ConfigurationSourceError
"""

from __future__ import annotations

import threading
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from openfeature_appconfig.feature_flags.errors import (
    ConfigurationNotFoundError,
    ConfigurationSourceError,
    InvalidParameterError,
    SessionExpiredError,
    ThrottledError,
)

from .base import ConfigurationSource, FetchResult

_INVALID_PARAMETER_CODES = ("BadRequestException", "InvalidParameterException")


def is_session_expired_message(message: str) -> bool:
    """Check if an invalid-parameter message points at an expired session."""
    lowered = message.lower()
    return "expired" in lowered or "session" in lowered


def _translate_client_error(error: ClientError, action: str) -> ConfigurationSourceError:
    details = error.response.get("Error", {})
    code = details.get("Code", "")
    message = details.get("Message", "") or str(error)

    if code == "ResourceNotFoundException":
        return ConfigurationNotFoundError(f"{action}: configuration not found: {message}")
    if code == "ThrottlingException":
        return ThrottledError(f"{action}: request throttled: {message}")
    if code in _INVALID_PARAMETER_CODES:
        if is_session_expired_message(message):
            return SessionExpiredError(f"{action}: session expired: {message}")
        return InvalidParameterError(f"{action}: invalid parameter: {message}")
    return ConfigurationSourceError(f"{action}: {code or 'error'}: {message}")


class AppConfigDataSource(ConfigurationSource):
    """Fetches configuration directly from the AppConfigData API."""

    requires_session = True

    def __init__(
        self,
        application: str,
        environment: str,
        configuration_profile: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        client: Any = None,
    ) -> None:
        """
        Create the source.

        Args:
            application: AppConfig application identifier
            environment: AppConfig environment identifier
            configuration_profile: AppConfig configuration profile identifier
            region: AWS region for the boto3 client
            endpoint_url: Custom endpoint (LocalStack) for the boto3 client
            client: Pre-built appconfigdata client (tests, custom sessions)
        """
        self.application = application
        self.environment = environment
        self.configuration_profile = configuration_profile
        self._client = client or boto3.client(
            "appconfigdata",
            region_name=region,
            endpoint_url=endpoint_url,
        )
        self._last_content: bytes | None = None
        self._content_lock = threading.Lock()

    def start_session(self) -> str:
        try:
            response = self._client.start_configuration_session(
                ApplicationIdentifier=self.application,
                EnvironmentIdentifier=self.environment,
                ConfigurationProfileIdentifier=self.configuration_profile,
            )
        except ClientError as e:
            raise _translate_client_error(e, "start_configuration_session") from e
        except BotoCoreError as e:
            raise ConfigurationSourceError(f"start_configuration_session: {e}") from e

        return response["InitialConfigurationToken"]

    def fetch_configuration(self, token: str) -> FetchResult:
        try:
            response = self._client.get_latest_configuration(ConfigurationToken=token)
            body = response.get("Configuration")
            content = body.read() if body is not None else b""
        except ClientError as e:
            raise _translate_client_error(e, "get_latest_configuration") from e
        except BotoCoreError as e:
            raise ConfigurationSourceError(f"get_latest_configuration: {e}") from e

        with self._content_lock:
            if content:
                self._last_content = content
            elif self._last_content is not None:
                content = self._last_content

        return FetchResult(
            content=content,
            next_token=response.get("NextPollConfigurationToken"),
        )

    def close(self) -> None:
        with self._content_lock:
            self._last_content = None
