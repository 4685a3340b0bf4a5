"""
AWS AppConfig feature flag provider.

USAGE:
    from openfeature_appconfig.feature_flags import AppConfigProvider, EvaluationContext

    provider = AppConfigProvider.from_env()

    # Full resolution details
    result = provider.resolve_string_value(
        "welcome-message",
        context=EvaluationContext(targeting_key="user-123", attributes={"language": "ja"}),
    )
    result.value, result.variant, result.reason

    # Value with a fallback for errors
    max_retries = provider.fetch_number_value("max-retries", default_value=3)

RESOLUTION FLOW:
    ensure session -> fetch blob -> decode JSON -> look up flag key
        scalar flag        -> coerce              (reason DEFAULT, variant "default")
        multi-variant flag -> select variant -> coerce
                              (reason DEFAULT or TARGETING_MATCH, variant name)

    Errors never leave the provider: they become ERROR results carrying the
    default value for the requested type.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from openfeature_appconfig.logger import evaluation_scope, logger

from .coercion import coerce
from .config import ProviderConfig, ProviderMode
from .errors import (
    AppConfigProviderError,
    ConfigurationDecodeError,
    ErrorCode,
    ProviderConfigurationError,
    SessionExpiredError,
)
from .models import (
    DEFAULT_VARIANT_NAME,
    ERROR_VARIANT_NAME,
    SELECTED_VARIANT_NAME,
    EvaluationContext,
    FlagType,
    MultiVariantFlag,
    Reason,
    ResolutionResult,
)
from .session import SessionManager
from .variants import has_usable_attributes, select_variant, targeting_matched

if TYPE_CHECKING:
    from openfeature_appconfig.sources.base import ConfigurationSource, FetchResult

PROVIDER_NAME = "AWS AppConfig Provider"


@dataclass(frozen=True)
class ProviderMetadata:
    name: str = PROVIDER_NAME


def decode_configuration(content: bytes | str) -> dict[str, Any]:
    """
    Decode a configuration payload into a mapping of flag key to definition.

    Raises:
        ConfigurationDecodeError: If the payload is not a JSON object
    """
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        data = json.loads(content)
    except ValueError as e:
        raise ConfigurationDecodeError(f"Failed to parse configuration: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationDecodeError(
            f"Failed to parse configuration: expected a JSON object, got {type(data).__name__}"
        )
    return data


def _build_source(config: ProviderConfig) -> ConfigurationSource:
    # Imported here: the sources import this package's errors module
    if config.mode is ProviderMode.AGENT:
        from openfeature_appconfig.sources.agent import AppConfigAgentSource

        return AppConfigAgentSource(
            application=config.application,
            environment=config.environment,
            configuration_profile=config.configuration_profile,
            agent_endpoint=config.agent_endpoint,
            timeout_seconds=config.agent_timeout_seconds,
        )

    from openfeature_appconfig.sources.sdk import AppConfigDataSource

    return AppConfigDataSource(
        application=config.application,
        environment=config.environment,
        configuration_profile=config.configuration_profile,
        region=config.region,
        endpoint_url=config.endpoint_url,
    )


class AppConfigProvider:
    """
    Resolves feature flags stored in an AWS AppConfig configuration profile.

    Supports scalar flags and multi-variant flags with targeting rules, over
    either the AppConfigData API (direct_sdk mode) or a local AppConfig
    Agent (agent mode).

    THREAD SAFETY:
        One provider can be shared across threads. Only the session token is
        shared state, and SessionManager guards it with a lock.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        source: ConfigurationSource | None = None,
    ) -> None:
        """
        Create a provider.

        Args:
            config: Provider settings. Read from the environment when neither
                config nor source is given.
            source: Pre-built configuration source (tests, custom transports)

        Raises:
            ProviderConfigurationError: If the settings are invalid
        """
        if config is not None:
            config = config.validate()
        elif source is None:
            config = ProviderConfig.from_env()

        self.config = config
        self._source = source if source is not None else _build_source(config)
        self._sessions = SessionManager(self._source) if self._source.requires_session else None

    @classmethod
    def from_env(cls, **overrides: Any) -> AppConfigProvider:
        """Create a provider from APPCONFIG_* environment variables."""
        return cls(ProviderConfig.from_env(**overrides))

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata()

    @property
    def source(self) -> ConfigurationSource:
        return self._source

    @property
    def sessions(self) -> SessionManager | None:
        return self._sessions

    def shutdown(self) -> None:
        """Drop the session and release the transport."""
        if self._sessions is not None:
            self._sessions.invalidate()
        self._source.close()

    # -------------------------------------------------------------------------
    # Resolution entry points
    # -------------------------------------------------------------------------

    def resolve_boolean_value(
        self,
        flag_key: str,
        context: EvaluationContext | None = None,
    ) -> ResolutionResult:
        return self.resolve(flag_key, FlagType.BOOLEAN, context)

    def resolve_string_value(
        self,
        flag_key: str,
        context: EvaluationContext | None = None,
    ) -> ResolutionResult:
        return self.resolve(flag_key, FlagType.STRING, context)

    def resolve_number_value(
        self,
        flag_key: str,
        context: EvaluationContext | None = None,
    ) -> ResolutionResult:
        return self.resolve(flag_key, FlagType.NUMBER, context)

    def resolve_object_value(
        self,
        flag_key: str,
        context: EvaluationContext | None = None,
    ) -> ResolutionResult:
        return self.resolve(flag_key, FlagType.OBJECT, context)

    # -------------------------------------------------------------------------
    # Fetch-with-fallback entry points
    # -------------------------------------------------------------------------

    def fetch_boolean_value(
        self,
        flag_key: str,
        default_value: bool,
        evaluation_context: EvaluationContext | None = None,
    ) -> bool:
        return self._fetch_value(flag_key, FlagType.BOOLEAN, default_value, evaluation_context)

    def fetch_string_value(
        self,
        flag_key: str,
        default_value: str,
        evaluation_context: EvaluationContext | None = None,
    ) -> str:
        return self._fetch_value(flag_key, FlagType.STRING, default_value, evaluation_context)

    def fetch_number_value(
        self,
        flag_key: str,
        default_value: int | float,
        evaluation_context: EvaluationContext | None = None,
    ) -> int | float:
        return self._fetch_value(flag_key, FlagType.NUMBER, default_value, evaluation_context)

    def fetch_object_value(
        self,
        flag_key: str,
        default_value: dict[str, Any],
        evaluation_context: EvaluationContext | None = None,
    ) -> dict[str, Any]:
        return self._fetch_value(flag_key, FlagType.OBJECT, default_value, evaluation_context)

    def _fetch_value(
        self,
        flag_key: str,
        flag_type: FlagType,
        default_value: Any,
        context: EvaluationContext | None,
    ) -> Any:
        result = self.resolve(flag_key, flag_type, context, default_value=default_value)
        if result.is_error:
            return default_value
        return result.value

    # -------------------------------------------------------------------------
    # Shared algorithm
    # -------------------------------------------------------------------------

    def resolve(
        self,
        flag_key: str,
        flag_type: FlagType | str,
        context: EvaluationContext | None = None,
        default_value: Any = None,
    ) -> ResolutionResult:
        """
        Resolve a flag to the requested type.

        Args:
            flag_key: The feature flag key
            flag_type: Requested output type
            context: Optional evaluation context for targeting
            default_value: Value carried by ERROR results (default: the
                type's zero value)

        Returns:
            A ResolutionResult. Never raises.
        """
        try:
            flag_type = FlagType(flag_type)
        except ValueError:
            result = self._error_result(
                flag_key, default_value, f"Unsupported flag type: {flag_type!r}", ErrorCode.GENERAL
            )
            logger.warning(
                "appconfig_flag_resolution_failed",
                flag_key=flag_key,
                error_code=result.error_code,
                error=result.error_message,
            )
            return result

        fallback = flag_type.zero_value if default_value is None else default_value
        targeting_key = context.targeting_key if context is not None else None

        with evaluation_scope(
            flag_key=flag_key,
            flag_type=flag_type.value,
            targeting_key=targeting_key,
        ):
            try:
                flag_data = self._get_flag_data(flag_key)
                result = self._create_resolution(flag_key, flag_data, flag_type, context)
            except AppConfigProviderError as e:
                result = self._error_result(flag_key, fallback, str(e), e.error_code)
            except Exception as e:
                logger.exception("appconfig_flag_unexpected_error", error=str(e))
                result = self._error_result(flag_key, fallback, str(e), ErrorCode.GENERAL)

            if result.is_error:
                logger.warning(
                    "appconfig_flag_resolution_failed",
                    error_code=result.error_code,
                    error=result.error_message,
                )
            else:
                logger.info(
                    "appconfig_flag_resolved",
                    variant=result.variant,
                    reason=result.reason.value,
                )
            return result

    def _create_resolution(
        self,
        flag_key: str,
        flag_data: Any,
        flag_type: FlagType,
        context: EvaluationContext | None,
    ) -> ResolutionResult:
        if not MultiVariantFlag.is_multi_variant(flag_data):
            return ResolutionResult(
                value=coerce(flag_data, flag_type),
                variant=DEFAULT_VARIANT_NAME,
                reason=Reason.DEFAULT,
                flag_key=flag_key,
            )

        flag = MultiVariantFlag.from_dict(flag_data)
        variant = select_variant(flag, context)
        return ResolutionResult(
            value=coerce(variant.value, flag_type),
            variant=variant.name if isinstance(variant.name, str) else SELECTED_VARIANT_NAME,
            reason=self._determine_reason(flag, context, variant),
            flag_key=flag_key,
        )

    @staticmethod
    def _determine_reason(flag, context, variant) -> Reason:
        if variant.name == flag.default_variant:
            return Reason.DEFAULT
        if not has_usable_attributes(context):
            return Reason.DEFAULT
        if targeting_matched(flag, context, variant):
            return Reason.TARGETING_MATCH
        return Reason.DEFAULT

    @staticmethod
    def _error_result(
        flag_key: str,
        value: Any,
        message: str,
        error_code: ErrorCode,
    ) -> ResolutionResult:
        return ResolutionResult(
            value=value,
            variant=ERROR_VARIANT_NAME,
            reason=Reason.ERROR,
            error_code=error_code.value,
            error_message=message,
            flag_key=flag_key,
        )

    # -------------------------------------------------------------------------
    # Configuration retrieval
    # -------------------------------------------------------------------------

    def _get_flag_data(self, flag_key: str) -> Any:
        """Fetch and decode the configuration. A missing key yields None."""
        fetched = self._fetch_configuration()
        return decode_configuration(fetched.content).get(flag_key)

    def _fetch_configuration(self) -> FetchResult:
        if self._sessions is None:
            return self._source.fetch_configuration("")

        token = self._sessions.ensure_valid_session()
        try:
            fetched = self._source.fetch_configuration(token)
        except SessionExpiredError as e:
            # Exactly one refresh; a second expiry propagates
            logger.info("appconfig_session_refresh_required", error=str(e))
            token = self._sessions.refresh(token)
            fetched = self._source.fetch_configuration(token)

        self._sessions.advance(token, fetched.next_token)
        return fetched


# =============================================================================
# SHARED PROVIDER (SINGLETON)
# =============================================================================

_provider_instance: AppConfigProvider | None = None
_provider_lock = threading.Lock()


def init_provider(**overrides: Any) -> AppConfigProvider | None:
    """
    Create the shared provider from the environment.

    Call this at application startup. Keyword arguments override the
    environment (see ProviderConfig.from_env).

    Returns:
        The shared provider, or None if the configuration is invalid
    """
    global _provider_instance

    if _provider_instance is not None:
        return _provider_instance

    with _provider_lock:
        if _provider_instance is None:
            try:
                _provider_instance = AppConfigProvider.from_env(**overrides)
            except ProviderConfigurationError as e:
                logger.warning("appconfig_provider_unavailable", error=str(e))
                return None
            logger.info(
                "appconfig_provider_initialized",
                application=_provider_instance.config.application,
                environment=_provider_instance.config.environment,
                configuration_profile=_provider_instance.config.configuration_profile,
                mode=_provider_instance.config.mode.value,
            )

    return _provider_instance


def get_provider() -> AppConfigProvider | None:
    """Get the shared provider, creating it from the environment on first use."""
    return init_provider()


def shutdown_provider() -> None:
    """Shut down the shared provider. Call this at application shutdown."""
    global _provider_instance

    with _provider_lock:
        if _provider_instance is not None:
            _provider_instance.shutdown()
            logger.info("appconfig_provider_shutdown")
        _provider_instance = None


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def _infer_flag_type(default: Any) -> FlagType:
    if isinstance(default, bool):
        return FlagType.BOOLEAN
    if isinstance(default, (int, float)):
        return FlagType.NUMBER
    if isinstance(default, dict):
        return FlagType.OBJECT
    return FlagType.STRING


def is_enabled(
    flag_key: str,
    context: EvaluationContext | None = None,
    default: bool = False,
) -> bool:
    """
    Check if a boolean flag is enabled on the shared provider.

    Returns `default` when the provider is unavailable or resolution fails.

    Example:
        from openfeature_appconfig.feature_flags import is_enabled

        if is_enabled("new-checkout"):
            show_new_checkout()
    """
    provider = get_provider()
    if provider is None:
        return default
    return provider.fetch_boolean_value(flag_key, default, context)


def get_flag(
    flag_key: str,
    context: EvaluationContext | None = None,
    default: Any = None,
    flag_type: FlagType | str | None = None,
) -> Any:
    """
    Get a flag value from the shared provider.

    The type is taken from `flag_type`, or inferred from `default`
    (bool, number, dict, otherwise string).

    Example:
        variant = get_flag(
            "checkout-experiment",
            EvaluationContext(attributes={"country": "US"}),
            default="control",
        )
    """
    provider = get_provider()
    if provider is None:
        return default

    resolved_type = flag_type if flag_type is not None else _infer_flag_type(default)
    result = provider.resolve(flag_key, resolved_type, context, default_value=default)
    if result.is_error:
        return default
    return result.value
