"""
Configuration transports for the AppConfig provider.

    AppConfigDataSource   boto3 AppConfigData API (session tokens)
    AppConfigAgentSource  local AppConfig Agent over HTTP (httpx)
"""

from .agent import DEFAULT_AGENT_ENDPOINT, AppConfigAgentSource
from .base import ConfigurationSource, FetchResult
from .sdk import AppConfigDataSource, is_session_expired_message

__all__ = [
    "ConfigurationSource",
    "FetchResult",
    "AppConfigDataSource",
    "AppConfigAgentSource",
    "DEFAULT_AGENT_ENDPOINT",
    "is_session_expired_message",
]
