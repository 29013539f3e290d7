"""AWS SigV4 request signing.

Two credential sources are supported, chosen once when the client is built:

- SDK-native: the full botocore credential chain (environment, shared
  config / profile, container and instance metadata).
- Environment: ``AWS_ACCESS_KEY_ID`` / ``AWS_SECRET_ACCESS_KEY`` /
  ``AWS_SESSION_TOKEN`` only.

Both sign with botocore's ``SigV4Auth`` at a caller-supplied timestamp.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Optional, Protocol

import httpx
from botocore.auth import SIGV4_TIMESTAMP, SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials, EnvProvider
from botocore.exceptions import BotoCoreError, NoCredentialsError
from botocore.session import Session

from .errors import SigningError

logger = logging.getLogger(__name__)

CredentialsProvider = Callable[[], Optional[Credentials]]


class Signer(Protocol):
    def sign(
        self,
        request: httpx.Request,
        body: Optional[BinaryIO],
        timestamp: datetime,
    ) -> None:
        """Add authentication headers to *request* in place, or raise."""


class _TimestampedSigV4Auth(SigV4Auth):
    """``SigV4Auth`` that signs at a fixed timestamp instead of "now"."""

    def __init__(self, credentials, service_name, region_name, timestamp: datetime):
        super().__init__(credentials, service_name, region_name)
        self._timestamp = timestamp

    def add_auth(self, request):
        if self.credentials is None:
            raise NoCredentialsError()
        request.context["timestamp"] = self._timestamp.strftime(SIGV4_TIMESTAMP)
        self._modify_request_before_signing(request)
        canonical_request = self.canonical_request(request)
        string_to_sign = self.string_to_sign(request, canonical_request)
        signature = self.signature(string_to_sign, request)
        self._inject_signature_to_request(request, signature)


def _to_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


class SigV4Signer:
    """Signs ``httpx.Request`` objects for an AWS-hosted search domain."""

    def __init__(
        self,
        region: str,
        service: str,
        credentials_provider: CredentialsProvider,
    ) -> None:
        self.region = region
        self.service = service
        self._credentials_provider = credentials_provider

    def sign(
        self,
        request: httpx.Request,
        body: Optional[BinaryIO],
        timestamp: datetime,
    ) -> None:
        try:
            credentials = self._credentials_provider()
        except BotoCoreError as exc:
            raise SigningError(f"failed to resolve AWS credentials: {exc}") from exc
        if credentials is None:
            raise SigningError("no AWS credentials available for request signing")

        # botocore reads the body from its own cursor and restores it; the
        # request keeps its own copy of the bytes for the transport.
        aws_request = AWSRequest(
            method=request.method,
            url=str(request.url),
            headers={
                key: value
                for key, value in request.headers.items()
                if key.lower() not in ("content-length", "user-agent")
            },
            data=body,
        )
        auth = _TimestampedSigV4Auth(
            credentials.get_frozen_credentials(),
            self.service,
            self.region,
            _to_utc(timestamp),
        )
        try:
            auth.add_auth(aws_request)
        except BotoCoreError as exc:
            raise SigningError(f"failed to sign request: {exc}") from exc

        for key in ("Authorization", "X-Amz-Date", "X-Amz-Security-Token"):
            if key in aws_request.headers:
                request.headers[key] = aws_request.headers[key]

        logger.debug(
            "Signed %s %s for %s/%s",
            request.method, request.url, self.region, self.service,
        )


def _sdk_credentials_provider() -> CredentialsProvider:
    # Session creation is lazy; credentials are resolved (and cached by
    # botocore) on the first signed request.
    session = Session()
    return session.get_credentials


def _env_credentials_provider() -> Optional[Credentials]:
    return EnvProvider().load()


def new_signer(aws_sdk_signer: bool, service: str, region: str) -> SigV4Signer:
    """Select the signer variant for a client."""
    if aws_sdk_signer:
        return SigV4Signer(region, service, _sdk_credentials_provider())
    return SigV4Signer(region, service, _env_credentials_provider)
