"""
Tests for Structured Logging

Tests the structured logging functionality including:
- Sensitive data scrubbing
- Request/user ID propagation
- Context management
"""

import unittest

import structlog

from filmmatch.logging_config import (
    scrub_sensitive_data,
    add_app_context,
    get_logger,
)
from filmmatch.logging_context import (
    set_request_id,
    get_request_id,
    set_user_id,
    get_user_id,
    clear_context,
    bind_context,
)


class TestSensitiveDataScrubbing(unittest.TestCase):
    """Test cases for sensitive data scrubbing."""

    def test_scrub_password_field(self):
        data = {"password": "hunter2", "name": "Alice"}
        scrubbed = scrub_sensitive_data(data)

        self.assertEqual(scrubbed["password"], "[REDACTED]")
        self.assertEqual(scrubbed["name"], "Alice")

    def test_scrub_email_field_and_inline_address(self):
        data = {"email": "alice@example.com", "note": "contact bob@example.org today"}
        scrubbed = scrub_sensitive_data(data)

        self.assertEqual(scrubbed["email"], "[REDACTED]")
        self.assertEqual(scrubbed["note"], "contact [EMAIL_REDACTED] today")

    def test_scrub_bearer_token_in_string(self):
        scrubbed = scrub_sensitive_data("Bearer abcdefghijklmnopqrstuvwxyz123")
        self.assertEqual(scrubbed, "Bearer [REDACTED]")

    def test_scrub_nested_structures(self):
        data = {"outer": {"items": [{"token": "abc"}, {"public": "visible"}]}}
        scrubbed = scrub_sensitive_data(data)

        self.assertEqual(scrubbed["outer"]["items"][0]["token"], "[REDACTED]")
        self.assertEqual(scrubbed["outer"]["items"][1]["public"], "visible")

    def test_identifiers_preserved(self):
        data = {"user_id": "u-1", "film_id": "f-1", "request_id": "r-1", "status_code": 200}
        self.assertEqual(scrub_sensitive_data(data), data)

    def test_non_string_values_untouched(self):
        self.assertEqual(scrub_sensitive_data({"count": 3, "ok": True}), {"count": 3, "ok": True})


class TestAppContextProcessor(unittest.TestCase):

    def test_adds_service_name(self):
        event = add_app_context(None, "info", {"event": "started"})
        self.assertEqual(event["service"], "filmmatch")
        self.assertIn("environment", event)


class TestLoggingContext(unittest.TestCase):
    """Test request and user context propagation."""

    def tearDown(self):
        clear_context()

    def test_set_request_id_generates_uuid(self):
        request_id = set_request_id()

        self.assertEqual(len(request_id), 36)
        self.assertEqual(get_request_id(), request_id)

    def test_set_explicit_request_id(self):
        set_request_id("req-42")
        self.assertEqual(get_request_id(), "req-42")
        self.assertEqual(structlog.contextvars.get_contextvars()["request_id"], "req-42")

    def test_set_user_id(self):
        set_user_id("user-7")

        self.assertEqual(get_user_id(), "user-7")
        self.assertEqual(structlog.contextvars.get_contextvars()["user_id"], "user-7")

    def test_clear_context(self):
        set_request_id("req-1")
        set_user_id("user-1")
        bind_context(film_id="film-1")

        clear_context()

        self.assertIsNone(get_request_id())
        self.assertIsNone(get_user_id())
        self.assertEqual(structlog.contextvars.get_contextvars(), {})

    def test_get_logger(self):
        logger = get_logger(__name__)
        self.assertTrue(hasattr(logger, "info"))


if __name__ == '__main__':
    unittest.main()
