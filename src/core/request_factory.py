"""Shaping of outbound notification requests."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping

from multidict import CIMultiDict
from yarl import URL

from src.ports.device import DeviceId, ParsedMessage
from src.ports.http import OutboundRequest
from src.ports.settings import OutboundSettings

__all__ = ["HeaderEnricher", "RequestConstructionError", "RequestFactory"]

# RFC 9110 token, used for both methods and header field names
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_ILLEGAL_URL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")

HeaderEnricher = Callable[[DeviceId, ParsedMessage], Mapping[str, str] | None]


class RequestConstructionError(ValueError):
    """Raised when an outbound request cannot be formed from the settings."""


class RequestFactory:
    """Build one outbound request per device message.

    The method, endpoint and header names come from resolved settings and are
    validated on every build, so a misconfigured endpoint surfaces as a
    construction error for each message rather than as a startup failure.
    """

    def __init__(
        self,
        settings: OutboundSettings,
        header_enricher: HeaderEnricher | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            settings: Resolved outbound settings.
            header_enricher: Optional hook returning extra headers for a
                device message. Its headers never override the device name
                or Content-Type headers.
        """
        self.method = settings.method
        self.endpoint = settings.endpoint
        self.device_name_header = settings.device_name_header
        self.content_type = settings.content_type
        self.header_enricher = header_enricher

    def _check(self) -> None:
        if not _TOKEN_RE.fullmatch(self.method):
            raise RequestConstructionError(f"invalid method {self.method!r}")

        if _ILLEGAL_URL_CHARS_RE.search(self.endpoint):
            raise RequestConstructionError(
                f"invalid endpoint {self.endpoint!r}: illegal character"
            )
        try:
            url = URL(self.endpoint)
            host = url.host
        except (ValueError, TypeError) as e:
            raise RequestConstructionError(f"invalid endpoint {self.endpoint!r}: {e}") from e
        if url.scheme not in ("http", "https") or not host:
            raise RequestConstructionError(
                f"invalid endpoint {self.endpoint!r}: absolute http(s) URL required"
            )

        if not _TOKEN_RE.fullmatch(self.device_name_header):
            raise RequestConstructionError(
                f"invalid device name header {self.device_name_header!r}"
            )

        if "\r" in self.content_type or "\n" in self.content_type:
            raise RequestConstructionError(f"invalid content type {self.content_type!r}")

    def _extra_headers(self, device_id: DeviceId, message: ParsedMessage) -> CIMultiDict[str]:
        if self.header_enricher is None:
            return CIMultiDict()
        try:
            extra = self.header_enricher(device_id, message) or {}
        except Exception as e:
            raise RequestConstructionError(f"header enrichment failed: {e}") from e

        headers: CIMultiDict[str] = CIMultiDict()
        for name, value in extra.items():
            if not _TOKEN_RE.fullmatch(name):
                raise RequestConstructionError(f"invalid enriched header name {name!r}")
            value = str(value)
            if "\r" in value or "\n" in value:
                raise RequestConstructionError(f"invalid value for enriched header {name!r}")
            headers[name] = value
        return headers

    def build(
        self, device_id: DeviceId, raw: bytes, message: ParsedMessage = None
    ) -> OutboundRequest:
        """Build the outbound request for one device message.

        Args:
            device_id: Identifier of the originating device.
            raw: Encoded message, used verbatim as the body.
            message: Decoded message; only passed to the header enricher.

        Returns:
            The request to send.

        Raises:
            RequestConstructionError: If the configured method, endpoint or
                header names cannot form a valid request.
        """
        self._check()
        device_name = str(device_id)
        if "\r" in device_name or "\n" in device_name:
            raise RequestConstructionError(f"invalid device identifier {device_name!r}")

        headers = self._extra_headers(device_id, message)
        headers[self.device_name_header] = device_name
        headers["Content-Type"] = self.content_type

        return OutboundRequest(
            method=self.method,
            url=self.endpoint,
            headers=headers,
            body=bytes(raw),
        )
