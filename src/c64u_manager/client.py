"""HTTP transport for the C64 Ultimate REST API.

One ``execute`` call issues exactly one request. Upload bodies are streamed
from a local file that is opened right before the request and closed as
soon as it completes, whatever the outcome.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Optional

import httpx

from .commands_model import ApiRequest, BodyKind
from .const import DEFAULT_PORT, DEFAULT_TIMEOUT_SECONDS, OCTET_STREAM
from .exception import CommandTimeoutError, LocalFileError, TransportError
from .response import ApiResponse, parse_response

logger = logging.getLogger(__name__)

_MAX_LOGGED_BODY = 512


class C64UClient:
    """Synchronous client bound to one device address."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Store the base URL and timeout; no connection is opened yet."""
        self.host = host
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport

    def url_for(self, request: ApiRequest) -> str:
        return f"{self.base_url}{request.path}"

    def execute(self, request: ApiRequest) -> ApiResponse:
        """Send a request and return the parsed envelope.

        Non-2xx responses are returned, not raised; see ``call``.

        Raises:
            LocalFileError: If the upload file cannot be opened or read
            CommandTimeoutError: If the request exceeds the timeout
            TransportError: On DNS, connection or protocol failures
        """
        url = self.url_for(request)
        headers: dict[str, str] = {}
        logger.debug("→ %s %s params=%s", request.method, url, request.params)

        with ExitStack() as stack:
            content = None
            if request.body_kind is BodyKind.RAW_FILE_STREAM:
                content = stack.enter_context(self._open_upload(request))
                headers["Content-Type"] = OCTET_STREAM
            try:
                with httpx.Client(
                    timeout=self.timeout, transport=self._transport
                ) as http:
                    response = http.request(
                        request.method,
                        url,
                        params=request.params or None,
                        content=content,
                        headers=headers,
                    )
            except httpx.TimeoutException as exc:
                logger.warning("%s timed out: %s", request.describe(), exc)
                raise CommandTimeoutError(
                    f"Request to {self.base_url} timed out",
                    [f"{type(exc).__name__}: {exc}"],
                ) from exc
            except httpx.HTTPError as exc:
                logger.warning("%s failed: %s", request.describe(), exc)
                raise TransportError(
                    "HTTP request failed", [f"{type(exc).__name__}: {exc}"]
                ) from exc
            except OSError as exc:
                raise LocalFileError(
                    "Failed to read file", [f"{request.upload_path}: {exc}"]
                ) from exc

        logger.debug(
            "← %d %s (%d bytes)",
            response.status_code,
            response.reason_phrase,
            len(response.content),
        )
        if response.content and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "  Response: %r", response.content[:_MAX_LOGGED_BODY]
            )
        return parse_response(
            response.content, response.status_code, response.reason_phrase
        )

    def call(
        self, request: ApiRequest, error_message: str = "API returned errors"
    ) -> ApiResponse:
        """Execute a request and raise if the device reported any error.

        Raises:
            DeviceReportedError: If the device returned an ``errors`` list
            HTTPStatusError: For a non-2xx status without device errors
        """
        response = self.execute(request)
        response.raise_for_errors(error_message)
        return response

    @staticmethod
    def _open_upload(request: ApiRequest):
        path = request.upload_path
        if path is None:
            raise LocalFileError("No file given for upload")
        if not path.is_file():
            raise LocalFileError("File not found", [str(path)])
        try:
            return path.open("rb")
        except OSError as exc:
            raise LocalFileError(
                "Failed to open file", [f"{path}: {exc}"]
            ) from exc
