"""
Error taxonomy for flag resolution.

SOURCE ERRORS:
    Raised by a ConfigurationSource (not found, throttled, invalid parameter,
    expired session, transport failure).

DECODE ERRORS:
    Raised when the configuration payload is not valid JSON.

RESOLUTION ERRORS:
    Raised when a multi-variant flag has no usable variant.

None of these cross the provider boundary: AppConfigProvider converts them
into ERROR results. ProviderConfigurationError is the exception, it is raised
when a provider is built with invalid settings.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes reported on ERROR results."""

    GENERAL = "GENERAL"
    PARSE_ERROR = "PARSE_ERROR"
    PROVIDER_NOT_READY = "PROVIDER_NOT_READY"


class AppConfigProviderError(Exception):
    """Base class for every error raised inside the provider."""

    error_code: ErrorCode = ErrorCode.GENERAL


class ProviderConfigurationError(AppConfigProviderError):
    """Provider settings are missing or invalid."""


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class ConfigurationSourceError(AppConfigProviderError):
    """The configuration source failed (network, transport, unexpected API error)."""


class ConfigurationNotFoundError(ConfigurationSourceError):
    """Application, environment or profile does not exist."""


class ThrottledError(ConfigurationSourceError):
    """The configuration source rejected the request because of rate limits."""


class InvalidParameterError(ConfigurationSourceError):
    """The configuration source rejected a request parameter."""


class SessionExpiredError(InvalidParameterError):
    """The session token is no longer accepted. Triggers one session refresh."""


# =============================================================================
# DECODE / RESOLUTION ERRORS
# =============================================================================


class ConfigurationDecodeError(AppConfigProviderError):
    """The configuration payload could not be decoded as a JSON object."""

    error_code = ErrorCode.PARSE_ERROR


class NoMatchingVariantError(AppConfigProviderError):
    """A multi-variant flag has no variant to serve."""
