"""Index lifecycle and document operations over a raw HTTP dispatcher.

Every public operation maps to one request built by :meth:`Client.dispatch`:

  - ``create_index``  -> ``PUT    {url}/{index}``
  - ``delete_index``  -> ``DELETE {url}/{index}``
  - ``add_document``  -> ``PUT    {url}/{index}/{type}/{id}``
"""

from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from typing import Any, NamedTuple, Optional

import httpx

from .connection_settings import (
    DEFAULT_REGION,
    DEFAULT_SERVICE,
    ClientConfig,
    load_config,
)
from .context import CallContext, background
from .errors import (
    PathBuildError,
    ResponseReadError,
    SigningError,
    TransportError,
    UnexpectedStatusCodeError,
)
from .payload import Payload, encode_payload, preview
from .signer import Signer, new_signer
from .transport import RetryingTransport, Transport


class DispatchResult(NamedTuple):
    body: bytes
    status_code: int


class Client:
    """Client for an Elasticsearch-compatible index API.

    Holds only immutable configuration plus its transport and signer, so one
    instance may be shared freely between threads.  Use one of the
    ``create_client*`` functions rather than calling this directly.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport,
        signer: Optional[Signer] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self._transport = transport
        if signer is None and config.sign_requests:
            signer = new_signer(config.aws_sdk_signer, config.aws_service, config.aws_region)
        self._signer = signer
        self._logger = logger or logging.getLogger(__name__)

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def indexes(self) -> tuple[str, ...]:
        return self.config.indexes

    @property
    def service_name(self) -> str:
        return self.config.service_name

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Operations ───────────────────────────────────────────────

    def create_index(
        self,
        index_name: str,
        settings: Optional[Payload] = None,
        ctx: Optional[CallContext] = None,
    ) -> int:
        """Create an index; returns the HTTP status code."""
        index_path = self.config.url + "/" + index_name
        return self.dispatch(index_path, "PUT", settings, ctx).status_code

    def delete_index(self, index_name: str, ctx: Optional[CallContext] = None) -> int:
        """Delete an index; returns the HTTP status code."""
        index_path = self.config.url + "/" + index_name
        return self.dispatch(index_path, "DELETE", None, ctx).status_code

    def add_document(
        self,
        index_name: str,
        document_type: str,
        document_id: str,
        document: Payload,
        ctx: Optional[CallContext] = None,
    ) -> int:
        """Add (or replace) a JSON document; returns the HTTP status code."""
        document_path = (
            self.config.url + "/" + index_name + "/" + document_type + "/" + document_id
        )
        return self.dispatch(document_path, "PUT", document, ctx).status_code

    # ── Dispatcher ───────────────────────────────────────────────

    def _fail(self, message: str, exc: BaseException, log_data: dict[str, Any]) -> None:
        self._logger.error(
            "%s: %s", message, exc,
            extra={"log_data": dict(log_data), "service": self.config.service_name},
        )

    def dispatch(
        self,
        path: str,
        method: str,
        payload: Optional[Payload] = None,
        ctx: Optional[CallContext] = None,
    ) -> DispatchResult:
        """Send one request and classify its response.

        Raises:
            PathBuildError: *path* or the request could not be built.
            SigningError: signing is enabled and failed.
            TransportError: no response was received.
            ResponseReadError: the response body could not be read.
            UnexpectedStatusCodeError: status outside ``[200, 300)``.
        """
        ctx = ctx or background()
        log_data: dict[str, Any] = {
            "url": path,
            "method": method,
            "request_id": ctx.request_id,
        }

        try:
            url = httpx.URL(path)
            if not url.scheme or not url.host:
                raise httpx.InvalidURL(f"missing scheme or host in {path!r}")
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            self._fail("failed to create url for elastic call", exc, log_data)
            raise PathBuildError(f"invalid path {path!r}: {exc}") from exc
        log_data["url"] = str(url)

        body_reader: Optional[io.BytesIO] = None
        try:
            body = encode_payload(payload)
            if body is not None:
                request = httpx.Request(
                    method,
                    url,
                    content=body,
                    headers={"Content-Type": "application/json"},
                )
                log_data["payload"] = preview(body)
                body_reader = io.BytesIO(body)
            else:
                request = httpx.Request(method, url)
        except (httpx.HTTPError, TypeError, ValueError) as exc:
            self._fail("failed to create request for call to elastic", exc, log_data)
            raise PathBuildError(f"failed to build request: {exc}") from exc

        if self.config.sign_requests:
            try:
                self._signer.sign(request, body_reader, datetime.now(timezone.utc))
            except SigningError as exc:
                self._fail("failed to sign request for call to elastic", exc, log_data)
                raise
            except Exception as exc:
                self._fail("failed to sign request for call to elastic", exc, log_data)
                raise SigningError(f"failed to sign request: {exc}") from exc

        try:
            response = self._transport.do(ctx, request)
        except TransportError as exc:
            self._fail("failed to call elastic", exc, log_data)
            raise
        except (httpx.HTTPError, OSError) as exc:
            self._fail("failed to call elastic", exc, log_data)
            raise TransportError(f"failed to call elastic: {exc}") from exc

        status_code = response.status_code
        log_data["http_code"] = status_code
        try:
            json_body = response.read()
        except (httpx.HTTPError, OSError) as exc:
            self._fail("failed to read response body from call to elastic", exc, log_data)
            raise ResponseReadError(
                f"failed to read response body: {exc}", status_code=status_code
            ) from exc
        finally:
            response.close()

        log_data["json_body"] = preview(json_body)
        log_data["status_code"] = status_code

        if status_code < 200 or status_code >= 300:
            error = UnexpectedStatusCodeError(status_code)
            self._fail("failed", error, log_data)
            raise error

        self._logger.debug(
            "%s %s -> %d", method, log_data["url"], status_code,
            extra={"log_data": log_data, "service": self.config.service_name},
        )
        return DispatchResult(json_body, status_code)


# ── Construction ─────────────────────────────────────────────────


def create_client_with_signing(
    url: str,
    aws_region: str,
    aws_service: str,
    aws_sdk_signer: bool,
    sign_requests: bool,
    transport: Transport,
    *indexes: str,
    logger: Optional[logging.Logger] = None,
) -> Client:
    """Create a client with every signing option spelled out."""
    config = ClientConfig(
        url=url,
        sign_requests=sign_requests,
        aws_region=aws_region,
        aws_service=aws_service,
        aws_sdk_signer=aws_sdk_signer,
        indexes=tuple(indexes),
    )
    return Client(config, transport, logger=logger)


def create_client_with_transport(
    url: str,
    sign_requests: bool,
    transport: Transport,
    *indexes: str,
    logger: Optional[logging.Logger] = None,
) -> Client:
    """Create a client around a caller-supplied transport."""
    return create_client_with_signing(
        url, DEFAULT_REGION, DEFAULT_SERVICE, False, sign_requests, transport,
        *indexes, logger=logger,
    )


def create_client(
    url: str,
    sign_requests: bool,
    max_retries: int,
    *indexes: str,
    logger: Optional[logging.Logger] = None,
) -> Client:
    """Create a client with a default :class:`RetryingTransport`."""
    transport = RetryingTransport(max_retries=max_retries)
    return create_client_with_transport(
        url, sign_requests, transport, *indexes, logger=logger,
    )


def create_client_from_config(
    config: Optional[ClientConfig] = None,
    transport: Optional[Transport] = None,
    logger: Optional[logging.Logger] = None,
    **overrides,
) -> Client:
    """Create a client from a :class:`ClientConfig`.

    Args:
        config: An explicit config.  When ``None``, one is built via
            :func:`load_config` (env vars + *overrides*).
        transport: Defaults to a :class:`RetryingTransport` tuned from *config*.
        logger: Receives the client's diagnostic records.
    """
    if config is None:
        config = load_config(**overrides)

    if transport is None:
        transport = RetryingTransport(
            max_retries=config.max_retries,
            timeout=config.timeout,
            backoff=config.retry_backoff,
            max_backoff=config.retry_backoff_max,
        )
    return Client(config, transport, logger=logger)
