"""
Verifies that credentials are redacted from log events and that each
negotiation carries a correlation ID.
"""

import contextvars

from call_transport.logging_config import (
    add_correlation_id,
    add_service_context,
    get_correlation_id,
    sanitize_secrets,
    set_correlation_id,
)


class TestLogSanitization:
    """Tests for secret sanitization processor."""

    def test_redact_ari_password(self):
        event_dict = {'event': 'Connecting', 'ari_password': 'SuperSecret123!'}
        result = sanitize_secrets(None, None, event_dict)

        assert result['ari_password'] == 'Su***REDACTED***'
        assert result['event'] == 'Connecting'

    def test_redact_api_token(self):
        result = sanitize_secrets(None, None, {'api_token': 'tok-1234567890'})
        assert result['api_token'] == 'to***REDACTED***'

    def test_short_values_fully_redacted(self):
        result = sanitize_secrets(None, None, {'password': 'abc'})
        assert result['password'] == '***REDACTED***'

    def test_nested_config_sanitized(self):
        event_dict = {
            'event': 'Config loaded',
            'config': {
                'asterisk': {'username': 'ari', 'password': 'secret-pass'},
                'capability_lookup': {'api_token': None, 'timeout_sec': 5.0},
            },
        }
        result = sanitize_secrets(None, None, event_dict)

        assert result['config']['asterisk']['username'] == 'ari'
        assert 'REDACTED' in result['config']['asterisk']['password']
        assert result['config']['capability_lookup']['api_token'] is None
        assert result['config']['capability_lookup']['timeout_sec'] == 5.0

    def test_no_false_positive_on_similar_keys(self):
        event_dict = {'recipient_id': '+15550100', 'passthrough': True, 'transport': 'legacy'}
        assert sanitize_secrets(None, None, event_dict) == event_dict

    def test_booleans_preserved(self):
        result = sanitize_secrets(None, None, {'auth': True})
        assert result['auth'] is True


class TestContextProcessors:

    def test_correlation_id_added_when_set(self):
        ctx = contextvars.copy_context()
        value = ctx.run(set_correlation_id)

        event = ctx.run(add_correlation_id, None, None, {'event': 'x'})

        assert event['correlation_id'] == value
        # Caller's context untouched
        assert get_correlation_id() is None or get_correlation_id() != value

    def test_service_context_uses_logger_name(self):
        event = add_service_context(None, None, {'event': 'x', 'logger': 'call_transport.core.negotiator'})
        assert event['service'] == 'call-transport'
        assert event['component'] == 'call_transport.core.negotiator'
