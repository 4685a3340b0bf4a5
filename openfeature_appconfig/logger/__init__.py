"""
Structured logging for the AppConfig provider.

BASIC USAGE:
    from openfeature_appconfig.logger import logger
    logger.info("appconfig_flag_resolved", flag_key="new-checkout")

CUSTOM SETTINGS (call before the first log):
    from openfeature_appconfig.logger import configure_logging
    configure_logging(service="checkout-api", env="production", level="DEBUG")

GROUPING LOGS OF ONE EVALUATION:
    from openfeature_appconfig.logger import evaluation_scope

    with evaluation_scope(flag_key="new-checkout"):
        logger.info("something happened")  # includes evaluation_id and flag_key
"""

from .context import (
    clear_context,
    evaluation_scope,
    generate_evaluation_id,
    get_evaluation_id,
    get_extra_context,
    inject_evaluation_context,
    set_evaluation_id,
    set_extra_context,
)
from .structured_logger import configure_logging, logger

__all__ = [
    # Main logger
    "logger",
    "configure_logging",
    # Evaluation context
    "evaluation_scope",
    "get_evaluation_id",
    "set_evaluation_id",
    "generate_evaluation_id",
    "get_extra_context",
    "set_extra_context",
    "clear_context",
    "inject_evaluation_context",
]
