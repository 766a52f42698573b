"""
HTTP Event Collector client.

The SplunkClient owns its transport, TLS context and token. It is built once
and shared read-only by every send, so concurrent sends on one event loop
reuse its connection pool without interfering with other clients in the same
process. Each event loop gets its own pool.
"""

import asyncio
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from hecpump.config.log_codes import DELIVERY_CLIENT_REBUILT, DELIVERY_SENT
from hecpump.config.tls import TLSConfig, build_tls_config
from hecpump.constants import (
    AUTH_HEADER_NAME,
    AUTH_HEADER_PREFIX,
    DEFAULT_COLLECTOR_PATH,
    REQUEST_TIMEOUT,
)
from hecpump.errors import (
    DeliveryTimeoutError,
    EventEncodingError,
    HECStatusError,
    InvalidSettingsError,
    InvalidURLError,
    TransportError,
)
from hecpump.meta import get_meta_http_headers

logger = logging.getLogger(__name__)


class SplunkAuth(httpx.Auth):
    """
    Adds the `authorization: Splunk <token>` header to every request.
    """

    def __init__(self, token: str):
        self.token = token

    def auth_flow(self, request):
        request.headers[AUTH_HEADER_NAME] = AUTH_HEADER_PREFIX + self.token
        yield request


def resolve_collector_url(collector_url: str) -> str:
    """
    Replace the path of the collector URL with the event ingestion path.

    Args:
        collector_url (str): The configured base URL.

    Returns:
        str: The endpoint events are posted to.

    Raises:
        InvalidURLError: If the URL does not parse or has no http(s) scheme or host.
    """
    try:
        url = httpx.URL(collector_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(url=collector_url, reason=str(e)) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidURLError(
            url=collector_url, reason="an absolute http(s) URL with a host is required"
        )

    return str(url.copy_with(path=DEFAULT_COLLECTOR_PATH))


def unix_seconds(ts: datetime) -> int:
    """
    Whole seconds since the Unix epoch. Naive datetimes are taken as UTC.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return math.floor(ts.timestamp())


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_event(event: Dict[str, Any], timestamp: datetime) -> bytes:
    """
    Serialize an event with its HEC envelope.

    Returns:
        bytes: `{"time": <unix seconds>, "event": {...}}` as UTF-8 JSON.

    Raises:
        EventEncodingError: If the event holds values JSON cannot represent.
    """
    try:
        payload = {"time": unix_seconds(timestamp), "event": event}
        return json.dumps(payload, default=_json_default, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError, OverflowError) as e:
        raise EventEncodingError(reason=str(e)) from e


def _extract_hec_error(response: httpx.Response) -> tuple:
    """
    Read the HEC error body, `{"text": ..., "code": ...}`, when present.
    """
    try:
        data = response.json()
        return data.get("text"), data.get("code")
    except (json.JSONDecodeError, ValueError, AttributeError):
        return response.reason_phrase or None, None


class SplunkClient:
    """
    Sends events to a Splunk HTTP Event Collector.

    Args:
        token (str): The HEC token.
        collector_url (str): Base URL of the collector; its path is replaced.
        skip_verify (bool): Disable server certificate verification.
        cert_file (str): Client certificate, required unless skip_verify.
        key_file (str): Client private key, required unless skip_verify.
        server_name (str): Expected TLS server name, used for SNI and hostname checks.
        timeout (float): Per-request HTTP timeout in seconds.
        strict_status (bool): Raise HECStatusError on non-2xx responses.
        transport (Optional[httpx.AsyncBaseTransport]): Transport to use instead
            of one built from the TLS settings.

    Raises:
        InvalidSettingsError: If the token or the URL is empty.
        InvalidURLError: If the URL cannot be parsed.
        TLSSetupError: If verification is enabled and the certificate pair cannot be loaded.
    """

    def __init__(
        self,
        token: str,
        collector_url: str,
        skip_verify: bool = False,
        cert_file: str = "",
        key_file: str = "",
        server_name: str = "",
        timeout: float = REQUEST_TIMEOUT,
        strict_status: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not token or not collector_url:
            raise InvalidSettingsError()

        self.collector_url = resolve_collector_url(collector_url)
        self.tls_config: TLSConfig = build_tls_config(
            skip_verify, cert_file, key_file, server_name
        )
        self.strict_status = strict_status
        self._timeout = timeout
        self._auth = SplunkAuth(token)
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _create_http_client(self) -> httpx.AsyncClient:
        transport = self._transport
        if transport is None:
            transport = httpx.AsyncHTTPTransport(verify=self.tls_config.verify_context)

        return httpx.AsyncClient(
            auth=self._auth,
            transport=transport,
            headers=get_meta_http_headers(),
            timeout=httpx.Timeout(self._timeout),
            trust_env=False,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        """
        The HTTP client bound to the running event loop.

        Pooled connections belong to the loop that opened them, so a new
        client and pool are built whenever send() runs on another loop, as
        happens with one asyncio.run() per batch.
        """
        loop = asyncio.get_running_loop()
        if self._http_client is None or self._loop is not loop:
            if self._http_client is not None:
                logger.debug(DELIVERY_CLIENT_REBUILT, extra={"url": self.collector_url})
            self._http_client = self._create_http_client()
            self._loop = loop
        return self._http_client

    @property
    def is_closed(self) -> bool:
        return self._http_client is None or self._http_client.is_closed

    def _request_extensions(self) -> Dict[str, Any]:
        if self.tls_config.server_name:
            return {"sni_hostname": self.tls_config.server_name}
        return {}

    async def send(
        self,
        event: Dict[str, Any],
        timestamp: datetime,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Post one event to the collector.

        The response is returned as is; status codes are only checked in
        strict status mode. Cancelling the calling task aborts the request
        and propagates asyncio.CancelledError.

        Args:
            event: The event fields.
            timestamp: The event time, sent as whole Unix seconds.
            timeout: Deadline in seconds for the whole call.

        Returns:
            httpx.Response: The collector response.

        Raises:
            EventEncodingError: If the event cannot be serialized.
            DeliveryTimeoutError: If the deadline or the HTTP timeout expires.
            TransportError: If the request fails at the network level.
            HECStatusError: In strict status mode, on a non-2xx response.
        """
        body = encode_event(event, timestamp)
        http_client = self._get_http_client()
        request = http_client.build_request(
            "POST",
            self.collector_url,
            content=body,
            headers={"Content-Type": "application/json"},
            extensions=self._request_extensions(),
        )

        try:
            if timeout is None:
                response = await http_client.send(request)
            else:
                response = await asyncio.wait_for(http_client.send(request), timeout)
        except asyncio.TimeoutError as e:
            raise DeliveryTimeoutError(timeout=timeout) from e
        except httpx.TimeoutException as e:
            raise DeliveryTimeoutError(timeout=self._timeout) from e
        except httpx.HTTPError as e:
            raise TransportError(reason=str(e) or type(e).__name__) from e

        logger.debug(
            DELIVERY_SENT,
            extra={"url": self.collector_url, "status_code": response.status_code},
        )

        if self.strict_status and not response.is_success:
            text, code = _extract_hec_error(response)
            raise HECStatusError(response.status_code, text=text, code=code)

        return response

    async def aclose(self) -> None:
        http_client, loop = self._http_client, self._loop
        self._http_client = None
        self._loop = None
        # A pool opened on a loop that has since finished cannot be awaited here.
        if http_client is not None and loop is asyncio.get_running_loop():
            await http_client.aclose()

    async def __aenter__(self) -> "SplunkClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
