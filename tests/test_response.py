"""Tests for response envelope parsing and typed payload access."""

import json

import pytest

from c64u_manager.exception import (
    DeviceReportedError,
    HTTPStatusError,
    PayloadTypeError,
)
from c64u_manager.response import ApiResponse, parse_response


def _body(data) -> bytes:
    return json.dumps(data).encode()


class TestParseResponse:
    """Test decoding of device responses."""

    def test_errors_are_lifted_out_of_payload(self):
        """A device error list with a 400 status leaves an empty payload."""
        resp = parse_response(_body({"errors": ["bad address"]}), 400, "Bad Request")
        assert resp.errors == ["bad address"]
        assert resp.payload == {}
        assert resp.has_errors
        assert not resp.ok
        assert resp.status_error is False

    def test_binary_body_is_kept_raw(self):
        """Non-JSON bodies are opaque bytes, not an error."""
        raw = bytes([0x00, 0xFF, 0x41, 0x80])
        resp = parse_response(raw, 200)
        assert resp.errors == []
        assert resp.payload == {}
        assert resp.raw_body == raw
        assert resp.ok

    def test_json_payload(self):
        """Fields other than errors end up in the payload."""
        body = _body({"version": "0.1", "errors": []})
        resp = parse_response(body, 200)
        assert resp.payload == {"version": "0.1"}
        assert resp.errors == []
        assert resp.raw_body == body

    def test_json_array_body_is_not_a_payload(self):
        """Only a JSON object populates the payload."""
        resp = parse_response(b"[1, 2, 3]", 200)
        assert resp.payload == {}
        assert resp.raw_body == b"[1, 2, 3]"

    def test_non_string_errors_are_ignored(self):
        """Error entries that are not strings are dropped."""
        resp = parse_response(_body({"errors": ["one", 2, None, "three"]}), 200)
        assert resp.errors == ["one", "three"]

    def test_status_without_device_errors(self):
        """A failing status with no error list synthesizes one."""
        resp = parse_response(b"", 404, "Not Found")
        assert resp.errors == ["HTTP 404: Not Found"]
        assert resp.status_error is True

    def test_status_text_falls_back_to_standard_phrase(self):
        """Without a reason phrase the standard one is used."""
        resp = parse_response(b"", 503)
        assert resp.errors == ["HTTP 503: Service Unavailable"]

    def test_unknown_status_code(self):
        """Non-standard codes get a generic label."""
        resp = parse_response(b"", 599)
        assert resp.errors == ["HTTP 599: Unknown Status"]


class TestRaiseForErrors:
    """Test mapping of responses to exceptions."""

    def test_success_does_not_raise(self):
        parse_response(_body({"ok": True}), 200).raise_for_errors()

    def test_device_errors(self):
        """A device error list raises DeviceReportedError with its details."""
        resp = parse_response(_body({"errors": ["no such drive"]}), 400)
        with pytest.raises(DeviceReportedError) as exc_info:
            resp.raise_for_errors()
        assert exc_info.value.message == "API returned errors"
        assert exc_info.value.details == ["no such drive"]

    def test_bare_status(self):
        """A bare failing status raises HTTPStatusError with the code."""
        resp = parse_response(b"oops", 500, "Internal Server Error")
        with pytest.raises(HTTPStatusError) as exc_info:
            resp.raise_for_errors("Request failed")
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Request failed"
        assert exc_info.value.details == ["HTTP 500: Internal Server Error"]


class TestTypedAccessors:
    """Test typed access to payload fields."""

    @pytest.fixture
    def resp(self):
        return ApiResponse(
            status_code=200,
            payload={
                "product": "Ultimate 64",
                "bus_id": 8,
                "size": 174848.0,
                "ratio": 0.5,
                "enabled": True,
                "drives": [{"a": {}}],
                "info": {"x": 1},
            },
        )

    def test_matching_types(self, resp):
        assert resp.get_str("product") == "Ultimate 64"
        assert resp.get_int("bus_id") == 8
        assert resp.get_int("size") == 174848
        assert resp.get_bool("enabled") is True
        assert resp.get_list("drives") == [{"a": {}}]
        assert resp.get_dict("info") == {"x": 1}

    def test_missing_field_returns_default(self, resp):
        assert resp.get_str("hostname") is None
        assert resp.get_str("hostname", "c64") == "c64"
        assert resp.get_int("missing", 0) == 0
        assert resp.get_list("files", []) == []

    def test_type_mismatch_raises(self, resp):
        """Asking for the wrong type is an error, not a silent default."""
        with pytest.raises(PayloadTypeError, match="Field 'bus_id' is not a string"):
            resp.get_str("bus_id")
        with pytest.raises(PayloadTypeError):
            resp.get_list("info")
        with pytest.raises(PayloadTypeError):
            resp.get_bool("product")

    def test_booleans_are_not_numbers(self, resp):
        with pytest.raises(PayloadTypeError):
            resp.get_int("enabled")

    def test_fractional_number_is_not_an_int(self, resp):
        with pytest.raises(PayloadTypeError, match="not an integer"):
            resp.get_int("ratio")
