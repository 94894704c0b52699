"""입력 검증 / 호출자 식별 테스트"""
from unittest.mock import MagicMock

import pytest

from tubescout.core.logging import sanitize_for_log
from tubescout.core.security import SecurityValidator, get_client_identifier
from tubescout.schemas import AnalysisRequest


def make_request(headers=None, host="10.0.0.9"):
    request = MagicMock()
    request.headers = headers or {}
    request.client = MagicMock(host=host) if host else None
    return request


class TestSecurityValidator:

    def test_valid_url(self):
        assert SecurityValidator.validate_source_ref("https://www.youtube.com/@veritasium") is True

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_rejected(self, value):
        with pytest.raises(ValueError, match="URL is required"):
            SecurityValidator.validate_source_ref(value)

    def test_too_long(self):
        with pytest.raises(ValueError):
            SecurityValidator.validate_source_ref("https://youtube.com/@" + "a" * 2048)

    @pytest.mark.parametrize("value", ["<script>", 'a"b', "a\\b", "a\nb"])
    def test_dangerous_chars(self, value):
        with pytest.raises(ValueError):
            SecurityValidator.validate_source_ref(value)


class TestClientIdentifier:

    def test_forwarded_for_first_entry(self):
        request = make_request({"x-forwarded-for": "203.0.113.5, 10.0.0.1"})
        assert get_client_identifier(request) == "203.0.113.5"

    def test_real_ip(self):
        assert get_client_identifier(make_request({"x-real-ip": "198.51.100.7"})) == "198.51.100.7"

    def test_peer_address(self):
        assert get_client_identifier(make_request()) == "10.0.0.9"

    def test_unknown(self):
        assert get_client_identifier(make_request(host=None)) == "unknown"


class TestAnalysisRequest:

    def test_strips_whitespace(self):
        assert AnalysisRequest(source_ref="  https://youtu.be/abc  ").source_ref == "https://youtu.be/abc"

    def test_empty_allowed_at_schema_level(self):
        assert AnalysisRequest().source_ref == ""

    def test_control_chars_rejected(self):
        with pytest.raises(ValueError):
            AnalysisRequest(source_ref="https://youtu.be/abc\r\n")


class TestSanitizeForLog:

    def test_masks_bearer_token(self):
        assert sanitize_for_log("Bearer abc.def") == "Bearer ***"

    def test_masks_query_keys(self):
        url = "https://www.googleapis.com/youtube/v3/channels?id=UC1&key=AIzaSecret"

        assert sanitize_for_log(url, max_length=200) == "https://www.googleapis.com/youtube/v3/channels?id=UC1&key=***"

    def test_masks_token_fields(self):
        assert "s3cret" not in sanitize_for_log("client_secret=s3cret&access_token=t0k")

    def test_plain_text_unchanged(self):
        assert sanitize_for_log("203.0.113.5") == "203.0.113.5"

    def test_truncates(self):
        assert sanitize_for_log("x" * 200, max_length=10) == "x" * 10 + "..."

    def test_empty(self):
        assert sanitize_for_log("") == "[empty]"
