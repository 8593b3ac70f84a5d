"""
Tests for the logging module.
"""

import structlog

from lambda_secrets_cache.logging import (
    RefreshTimer,
    get_function_name,
    get_request_id,
    logging_context,
)


class TestLoggingContext:
    """Test logging context management."""

    def test_logging_context_sets_values(self):
        with logging_context(request_id='req-123', function_name='orders-api'):
            assert get_request_id() == 'req-123'
            assert get_function_name() == 'orders-api'

    def test_logging_context_restores_values(self):
        with logging_context(request_id='outer'):
            assert get_request_id() == 'outer'

            with logging_context(request_id='inner'):
                assert get_request_id() == 'inner'

            assert get_request_id() == 'outer'

        assert get_request_id() is None

    def test_logging_context_partial_values(self):
        with logging_context(function_name='orders-api'):
            assert get_function_name() == 'orders-api'
            assert get_request_id() is None

    def test_context_merged_into_log_entries(self):
        with logging_context(request_id='req-1'):
            event = structlog.contextvars.merge_contextvars(None, 'info', {'event': 'x'})
        assert event == {'request_id': 'req-1', 'event': 'x'}

    def test_nothing_merged_without_context(self):
        event = structlog.contextvars.merge_contextvars(None, 'info', {'event': 'x'})
        assert event == {'event': 'x'}


class TestRefreshTimer:
    """Test refresh timing."""

    def test_timer_records_attempts(self):
        timer = RefreshTimer()

        with timer.attempt():
            pass
        with timer.attempt():
            pass

        assert len(timer.attempts) == 2
        assert all(ms >= 0 for ms in timer.attempts)

    def test_timer_records_failed_attempt(self):
        timer = RefreshTimer()
        try:
            with timer.attempt():
                raise RuntimeError('boom')
        except RuntimeError:
            pass
        assert len(timer.attempts) == 1

    def test_timer_summary(self):
        timer = RefreshTimer()
        with timer.attempt():
            pass

        summary = timer.summary()

        assert summary['attempts'] == 1
        assert summary['total_ms'] >= 0
        assert len(summary['attempt_ms']) == 1
