"""
Shared fixtures for the provider tests.
"""

import json
import threading

import pytest

from openfeature_appconfig.sources.base import ConfigurationSource, FetchResult


class FakeSource(ConfigurationSource):
    """
    In-memory configuration source.

    Args:
        configuration: dict (encoded as JSON) or raw bytes to serve
        fetch_errors: exceptions raised by successive fetches before serving
        session_errors: exceptions raised by successive start_session calls
        requires_session: whether the provider should manage a session
    """

    def __init__(
        self,
        configuration=None,
        fetch_errors=None,
        session_errors=None,
        requires_session=True,
    ):
        self.configuration = configuration if configuration is not None else {}
        self.fetch_errors = list(fetch_errors or [])
        self.session_errors = list(session_errors or [])
        self.requires_session = requires_session
        self.sessions_started = 0
        self.fetch_tokens = []
        self.closed = False
        self._lock = threading.Lock()

    def start_session(self):
        with self._lock:
            if self.session_errors:
                raise self.session_errors.pop(0)
            self.sessions_started += 1
            return f"token-{self.sessions_started}"

    def fetch_configuration(self, token):
        with self._lock:
            self.fetch_tokens.append(token)
            if self.fetch_errors:
                raise self.fetch_errors.pop(0)
        content = self.configuration
        if not isinstance(content, bytes):
            content = json.dumps(content).encode("utf-8")
        return FetchResult(content=content)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_source_factory():
    return FakeSource


@pytest.fixture
def language_flag():
    """Multi-variant string flag with one language rule."""
    return {
        "variants": [
            {"name": "english", "value": "Hello"},
            {"name": "japanese", "value": "Konnichiwa"},
            {"name": "spanish", "value": "Hola"},
        ],
        "defaultVariant": "english",
        "targetingRules": [
            {
                "conditions": [
                    {"attribute": "language", "operator": "equals", "value": "ja"}
                ],
                "variant": "japanese",
            },
            {
                "conditions": [
                    {"attribute": "language", "operator": "equals", "value": "es"}
                ],
                "variant": "spanish",
            },
        ],
    }
