"""
Tests for error envelope normalization.
"""

import json

from fortie.core.envelope import EnvelopeShape, parse_error_body, parse_error_payload
from fortie.core.exceptions import ErrorCategory, RemoteServiceError


class TestParseErrorPayload:
    """Tests for the envelope shapes."""

    def test_lower_and_upper_case_are_identical(self):
        upper = parse_error_body(
            json.dumps({"ErrorInformation": {"Error": "X", "Message": "m", "Code": 7}})
        )
        lower = parse_error_body(
            json.dumps({"ErrorInformation": {"error": "X", "message": "m", "code": 7}})
        )

        assert upper.shape == EnvelopeShape.UPPER_CASE
        assert lower.shape == EnvelopeShape.LOWER_CASE
        assert upper.to_exception() == lower.to_exception()
        assert lower.to_exception() == RemoteServiceError("X", "m", 7)

    def test_numeric_error_and_string_code(self):
        information = parse_error_payload(
            {"ErrorInformation": {"error": 1, "message": "Kan inte hitta kunden.", "code": "2000433"}}
        )
        assert information.error == "1"
        assert information.message == "Kan inte hitta kunden."
        assert information.code == 2000433

    def test_upper_case_block_without_error_key(self):
        information = parse_error_body(
            json.dumps({"ErrorInformation": {"Message": "m", "Code": 7}}), status=400
        )
        assert information.shape == EnvelopeShape.UPPER_CASE
        assert information.error is None
        assert information.message == "m"
        assert information.code == 7

    def test_camel_case_block(self):
        information = parse_error_payload(
            {"errorInformation": {"error": "X", "message": "m", "code": 7}}
        )
        assert information.shape == EnvelopeShape.LOWER_CASE

    def test_message_only(self):
        information = parse_error_payload({"message": "Unauthorized"})
        assert information.shape == EnvelopeShape.MESSAGE_ONLY
        assert information.error == "Unauthorized"
        assert information.message == "Unauthorized"
        assert information.code is None

    def test_unknown_shape(self):
        assert parse_error_payload({"status": "failed"}) is None
        assert parse_error_payload(["not", "a", "dict"]) is None


class TestParseErrorBody:
    """Tests for raw body fallbacks."""

    def test_non_json_body(self):
        information = parse_error_body(b"<html>Bad Gateway</html>", status=502)
        assert information.shape == EnvelopeShape.UNRECOGNIZED
        assert information.error == "HTTP 502"
        assert information.message == "<html>Bad Gateway</html>"

    def test_empty_body(self):
        information = parse_error_body(b"", status=500)
        assert information.error == "HTTP 500"
        assert information.message is None

    def test_exception_carries_status(self):
        information = parse_error_body(
            b'{"ErrorInformation": {"error": 1, "message": "Not found", "code": 2000430}}'
        )
        error = information.to_exception(status=404)
        assert error.status == 404
        assert error.code == 2000430
        assert error.category == ErrorCategory.EXTERNAL
        assert str(error) == "Not found"
