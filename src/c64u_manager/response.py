"""Helpers to parse the JSON envelope returned by every API call."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from .exception import DeviceReportedError, HTTPStatusError, PayloadTypeError

_MISSING: Any = object()


def _status_text(status_code: int, reason: str) -> str:
    if reason:
        return reason
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown Status"


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


@dataclass(slots=True)
class ApiResponse:
    """Normalized view of a device response.

    ``errors`` is always lifted out of the JSON object, so ``payload`` never
    contains it. ``raw_body`` keeps the body untouched, which is what binary
    memory reads consume.
    """

    status_code: int
    errors: List[str] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)
    raw_body: bytes = b""
    status_error: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def ok(self) -> bool:
        return _is_success(self.status_code) and not self.errors

    def raise_for_errors(self, message: str = "API returned errors") -> None:
        """Raise the typed error matching this response, if any.

        A device supplied error list wins over the bare HTTP status.
        """
        if not self.errors:
            return
        if self.status_error:
            raise HTTPStatusError(message, self.status_code, self.errors)
        raise DeviceReportedError(message, self.errors)

    def _get(
        self, key: str, default: Any, expected: tuple[type, ...], label: str
    ) -> Any:
        value = self.payload.get(key, _MISSING)
        if value is _MISSING:
            return default
        if isinstance(value, bool) and bool not in expected:
            raise PayloadTypeError(
                f"Field '{key}' is not {label}", [f"got boolean {value!r}"]
            )
        if not isinstance(value, expected):
            raise PayloadTypeError(
                f"Field '{key}' is not {label}",
                [f"got {type(value).__name__} {value!r}"],
            )
        return value

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a string field, or ``default`` when absent."""
        return self._get(key, default, (str,), "a string")

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Return an integer field; integral floats are accepted."""
        value = self._get(key, _MISSING, (int, float), "a number")
        if value is _MISSING:
            return default
        if isinstance(value, float):
            if not value.is_integer():
                raise PayloadTypeError(
                    f"Field '{key}' is not an integer", [f"got {value!r}"]
                )
            return int(value)
        return value

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._get(key, default, (bool,), "a boolean")

    def get_list(self, key: str, default: Optional[list] = None) -> Optional[list]:
        return self._get(key, default, (list,), "an array")

    def get_dict(self, key: str, default: Optional[dict] = None) -> Optional[dict]:
        return self._get(key, default, (dict,), "an object")


def parse_response(body: bytes, status_code: int, reason: str = "") -> ApiResponse:
    """Decode a response body into an ``ApiResponse``.

    Bodies that are not a JSON object are kept as opaque binary without an
    error, since memory reads return raw bytes. A non-2xx status with no
    device error list gets a synthesized ``HTTP <code>: <text>`` error.
    """
    response = ApiResponse(status_code=status_code, raw_body=body)

    if body:
        try:
            decoded = json.loads(body)
        except (ValueError, UnicodeDecodeError):
            decoded = None
        if isinstance(decoded, dict):
            raw_errors = decoded.pop("errors", None)
            if isinstance(raw_errors, list):
                response.errors = [e for e in raw_errors if isinstance(e, str)]
            response.payload = decoded

    if not _is_success(status_code) and not response.errors:
        response.errors.append(
            f"HTTP {status_code}: {_status_text(status_code, reason)}"
        )
        response.status_error = True

    return response
