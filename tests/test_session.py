"""
Tests for the session token lifecycle.

Run with:
    pytest tests/test_session.py -v
"""

import threading

import pytest

from openfeature_appconfig.feature_flags.errors import (
    ConfigurationNotFoundError,
    ThrottledError,
)
from openfeature_appconfig.feature_flags.session import SessionManager, SessionState


class TestSessionLifecycle:
    """Test SessionManager state transitions."""

    def test_starts_uninitialized(self, fake_source_factory):
        sessions = SessionManager(fake_source_factory())
        assert sessions.state is SessionState.UNINITIALIZED

    def test_ensure_creates_session_once(self, fake_source_factory):
        source = fake_source_factory()
        sessions = SessionManager(source)

        assert sessions.ensure_valid_session() == "token-1"
        assert sessions.ensure_valid_session() == "token-1"
        assert sessions.state is SessionState.ACTIVE
        assert source.sessions_started == 1

    def test_refresh_creates_new_session(self, fake_source_factory):
        source = fake_source_factory()
        sessions = SessionManager(source)
        stale = sessions.ensure_valid_session()

        assert sessions.refresh(stale) == "token-2"
        assert sessions.ensure_valid_session() == "token-2"
        assert source.sessions_started == 2

    def test_refresh_with_already_replaced_token(self, fake_source_factory):
        source = fake_source_factory()
        sessions = SessionManager(source)
        stale = sessions.ensure_valid_session()
        sessions.refresh(stale)

        # A second caller holding the same stale token reuses the new session
        assert sessions.refresh(stale) == "token-2"
        assert source.sessions_started == 2

    def test_advance_swaps_token(self, fake_source_factory):
        sessions = SessionManager(fake_source_factory())
        token = sessions.ensure_valid_session()

        sessions.advance(token, "next-token")
        assert sessions.ensure_valid_session() == "next-token"

    def test_advance_ignores_stale_or_empty(self, fake_source_factory):
        sessions = SessionManager(fake_source_factory())
        token = sessions.ensure_valid_session()

        sessions.advance("other-token", "next-token")
        sessions.advance(token, None)
        assert sessions.ensure_valid_session() == token

    def test_invalidate(self, fake_source_factory):
        source = fake_source_factory()
        sessions = SessionManager(source)
        sessions.ensure_valid_session()

        sessions.invalidate()

        assert sessions.state is SessionState.UNINITIALIZED
        assert sessions.ensure_valid_session() == "token-2"


class TestSessionErrors:
    """Test session start failures."""

    @pytest.mark.parametrize(
        "error",
        [ConfigurationNotFoundError("no such profile"), ThrottledError("slow down")],
    )
    def test_start_failure_propagates(self, fake_source_factory, error):
        sessions = SessionManager(fake_source_factory(session_errors=[error]))

        with pytest.raises(type(error)):
            sessions.ensure_valid_session()

        assert sessions.state is SessionState.UNINITIALIZED

    def test_start_failure_is_not_retried(self, fake_source_factory):
        source = fake_source_factory(session_errors=[ThrottledError("slow down")])
        sessions = SessionManager(source)

        with pytest.raises(ThrottledError):
            sessions.ensure_valid_session()

        # The next call tries again from scratch
        assert sessions.ensure_valid_session() == "token-1"


class TestSessionThreadSafety:
    """Test concurrent session creation."""

    def test_concurrent_ensure_creates_one_session(self, fake_source_factory):
        source = fake_source_factory()
        sessions = SessionManager(source)

        tokens = []
        errors = []

        def ensure():
            try:
                tokens.append(sessions.ensure_valid_session())
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=ensure) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(errors) == 0
        assert len(tokens) == 20
        assert set(tokens) == {"token-1"}
        assert source.sessions_started == 1

    def test_concurrent_refresh_creates_one_session(self, fake_source_factory):
        source = fake_source_factory()
        sessions = SessionManager(source)
        stale = sessions.ensure_valid_session()

        tokens = []

        def refresh():
            tokens.append(sessions.refresh(stale))

        threads = [threading.Thread(target=refresh) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert set(tokens) == {"token-2"}
        assert source.sessions_started == 2
