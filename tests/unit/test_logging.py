"""Unit tests for logging service."""

from taiko_webui.services.logging_service import configure_logging, get_logger, redact_sensitive


class TestRedactSensitive:
    """Tests for redact_sensitive processor."""

    def test_redacts_password(self):
        event_dict = {"password": "sticks123", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["password"] == "REDACTED"

    def test_redacts_password_hash(self):
        event_dict = {"password_hash": "$2b$12$abc", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["password_hash"] == "REDACTED"

    def test_redacts_session_material(self):
        event_dict = {
            "authorization": "eyJhbGciOi...",
            "session_token": "eyJhbGciOi...",
            "cookie": "Authorization=eyJ...",
            "session_secret": "s3cret",
        }
        result = redact_sensitive(None, None, event_dict)
        assert set(result.values()) == {"REDACTED"}

    def test_redacts_access_code(self):
        event_dict = {"access_code": "AC-001", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["access_code"] == "REDACTED"

    def test_preserves_non_sensitive_fields(self):
        event_dict = {
            "correlation_id": "abc-123",
            "username": "drummer",
            "baid": 42,
        }
        result = redact_sensitive(None, None, event_dict)
        assert result == {"correlation_id": "abc-123", "username": "drummer", "baid": 42}

    def test_case_insensitive_redaction(self):
        event_dict = {"Password": "secret1", "SESSION_SECRET": "secret2"}
        result = redact_sensitive(None, None, event_dict)
        assert result["Password"] == "REDACTED"
        assert result["SESSION_SECRET"] == "REDACTED"


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_sets_level(self):
        configure_logging("DEBUG")
        logger = get_logger("test")
        assert logger is not None

    def test_output_is_json_and_redacted(self, capsys):
        configure_logging("INFO")
        logger = get_logger("test")

        logger.info("login_failed", username="drummer", password="sticks123")

        out = capsys.readouterr().out
        assert '"event": "login_failed"' in out
        assert "sticks123" not in out
