"""Infrastructure layer: HTTP transports for the signed request pipeline.

Transports only move bytes. They add the signing headers of the request's
envelope, apply the timeout and translate connectivity failures into
TransportError. They never retry and never look at COMRESULT.
"""

from __future__ import annotations

import json
import logging
import ssl
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

import httpx
import requests

from wwsvc.common.exceptions import (
    ConfigurationError,
    SerializationError,
    TransportError,
    TransportTimeoutError,
)
from wwsvc.common.logging_utils import mask_secret
from wwsvc.common.models import TlsMode

if TYPE_CHECKING:
    from wwsvc.common.crypto import SignedEnvelope
    from wwsvc.common.models import ClientConfig

logger = logging.getLogger(__name__)


@dataclass
class RequestDescriptor:
    """One fully prepared call: where it goes, what it carries, how it is signed."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    envelope: SignedEnvelope | None = None
    function: str | None = None
    revision: int | None = None
    timeout: float | None = None
    redact: tuple[str, ...] = ()

    def all_headers(self) -> dict[str, str]:
        headers = dict(self.headers)
        if self.envelope is not None:
            headers.update(self.envelope.as_headers())
        return headers

    def to_http_string(self) -> str:
        """Render the request as an HTTP/1.1 message for debug logs."""
        url = httpx.URL(self.url)
        lines = [f"{self.method} {url.raw_path.decode('ascii')} HTTP/1.1"]
        host = url.host if url.port is None else f"{url.host}:{url.port}"
        lines.append(f"host: {host}")
        lines.extend(f"{name}: {value}" for name, value in self.all_headers().items())
        lines.append("")
        if self.body:
            lines.append(self.body.decode("utf-8", errors="replace"))
        text = "\n".join(lines)
        for secret in self.redact:
            text = mask_secret(text, secret)
        return text


@dataclass
class RawResponse:
    status_code: int
    headers: Mapping[str, str]
    content: bytes

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def text(self) -> str:
        try:
            return self.content.decode("utf-8")
        except UnicodeDecodeError:
            return self.content.decode("cp1252", errors="replace")

    def json(self) -> Any:
        try:
            return json.loads(self.text())
        except ValueError as e:
            msg = f"Response body is not valid JSON (HTTP {self.status_code})"
            raise SerializationError(msg) from e


def _verify_setting(config: ClientConfig) -> bool | str:
    """requests-style verify value for the configured TLS mode."""
    if config.tls_mode is TlsMode.PINNED:
        return str(config.ca_bundle)
    return config.tls_mode is not TlsMode.INSECURE


def _ssl_context(config: ClientConfig) -> ssl.SSLContext | bool:
    if config.tls_mode is TlsMode.PINNED:
        try:
            return ssl.create_default_context(cafile=str(config.ca_bundle))
        except (OSError, ssl.SSLError) as e:
            msg = f"Cannot load pinned CA bundle {config.ca_bundle}: {e}"
            raise ConfigurationError(msg) from e
    return config.tls_mode is not TlsMode.INSECURE


class HttpTransport:
    """Blocking transport over a requests.Session."""

    def __init__(
        self,
        config: ClientConfig,
        session: requests.Session | None = None,
    ) -> None:
        self.default_timeout = config.timeout
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            session.verify = _verify_setting(config)
        self.session = session

    def send(self, descriptor: RequestDescriptor) -> RawResponse:
        timeout = descriptor.timeout or self.default_timeout
        try:
            response = self.session.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.all_headers(),
                data=descriptor.body,
                timeout=timeout,
            )
        except requests.Timeout as e:
            msg = f"{descriptor.method} {descriptor.function or 'request'} timed out after {timeout}s"
            raise TransportTimeoutError(msg) from e
        except requests.RequestException as e:
            msg = f"{descriptor.method} {descriptor.function or 'request'} failed: {e}"
            raise TransportError(msg) from e
        except UnicodeEncodeError as e:
            msg = f"{descriptor.function or 'request'} headers cannot be encoded: {e}"
            raise SerializationError(msg) from e
        logger.debug(
            "%s %s -> HTTP %s", descriptor.method, descriptor.function, response.status_code
        )
        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


class AsyncHttpTransport:
    """Cooperative transport over an httpx.AsyncClient.

    The awaited request is the only suspension point of a call.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.default_timeout = config.timeout
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(verify=_ssl_context(config))
        self.client = client

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        timeout = descriptor.timeout or self.default_timeout
        try:
            response = await self.client.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.all_headers(),
                content=descriptor.body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            msg = f"{descriptor.method} {descriptor.function or 'request'} timed out after {timeout}s"
            raise TransportTimeoutError(msg) from e
        except httpx.HTTPError as e:
            msg = f"{descriptor.method} {descriptor.function or 'request'} failed: {e}"
            raise TransportError(msg) from e
        except UnicodeEncodeError as e:
            msg = f"{descriptor.function or 'request'} headers cannot be encoded: {e}"
            raise SerializationError(msg) from e
        logger.debug(
            "%s %s -> HTTP %s", descriptor.method, descriptor.function, response.status_code
        )
        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
