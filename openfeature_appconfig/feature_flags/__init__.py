"""
Feature flags backed by AWS AppConfig.

USAGE:
    from openfeature_appconfig.feature_flags import (
        AppConfigProvider,
        EvaluationContext,
        is_enabled,
    )

    # Shared provider configured from APPCONFIG_* environment variables
    if is_enabled("new-checkout"):
        show_new_checkout()

    # Explicit provider with targeting
    provider = AppConfigProvider.from_env()
    result = provider.resolve_string_value(
        "welcome-message",
        EvaluationContext(targeting_key="user-123", attributes={"language": "ja"}),
    )
    # result.value, result.variant, result.reason

ENVIRONMENT VARIABLES:
    APPCONFIG_APPLICATION: AppConfig application (required)
    APPCONFIG_ENVIRONMENT: AppConfig environment (required)
    APPCONFIG_CONFIGURATION_PROFILE: AppConfig configuration profile (required)
    APPCONFIG_MODE: direct_sdk or agent (default: direct_sdk)
    APPCONFIG_AGENT_ENDPOINT: Agent URL (default: http://localhost:2772)
"""

from .coercion import coerce, coerce_boolean, coerce_number, coerce_object, coerce_string
from .config import ProviderConfig, ProviderMode
from .errors import (
    AppConfigProviderError,
    ConfigurationDecodeError,
    ConfigurationNotFoundError,
    ConfigurationSourceError,
    ErrorCode,
    InvalidParameterError,
    NoMatchingVariantError,
    ProviderConfigurationError,
    SessionExpiredError,
    ThrottledError,
)
from .models import (
    Condition,
    EvaluationContext,
    FlagType,
    MultiVariantFlag,
    Reason,
    ResolutionResult,
    TargetingRule,
    Variant,
)
from .provider import (
    AppConfigProvider,
    ProviderMetadata,
    decode_configuration,
    get_flag,
    get_provider,
    init_provider,
    is_enabled,
    shutdown_provider,
)
from .session import SessionManager, SessionState
from .targeting import Operator, condition_matches, rule_matches
from .variants import select_variant

__all__ = [
    # High-level API
    "AppConfigProvider",
    "ProviderMetadata",
    "is_enabled",
    "get_flag",
    # Shared provider management
    "init_provider",
    "get_provider",
    "shutdown_provider",
    # Configuration
    "ProviderConfig",
    "ProviderMode",
    # Data model
    "Condition",
    "EvaluationContext",
    "FlagType",
    "MultiVariantFlag",
    "Reason",
    "ResolutionResult",
    "TargetingRule",
    "Variant",
    # Engine
    "Operator",
    "SessionManager",
    "SessionState",
    "coerce",
    "coerce_boolean",
    "coerce_number",
    "coerce_object",
    "coerce_string",
    "condition_matches",
    "decode_configuration",
    "rule_matches",
    "select_variant",
    # Errors
    "AppConfigProviderError",
    "ConfigurationDecodeError",
    "ConfigurationNotFoundError",
    "ConfigurationSourceError",
    "ErrorCode",
    "InvalidParameterError",
    "NoMatchingVariantError",
    "ProviderConfigurationError",
    "SessionExpiredError",
    "ThrottledError",
]
