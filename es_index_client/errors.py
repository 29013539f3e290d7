"""Error taxonomy for calls made through the dispatcher.

Every failure of a call surfaces as exactly one of five exception types, all
sharing :class:`ElasticsearchClientError` as a base.  Each carries an
:class:`ErrorKind` tag and the HTTP status code known at the point of
failure (``0`` when no response was received).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    PATH_BUILD = "path_build"
    SIGNING = "signing"
    TRANSPORT = "transport"
    RESPONSE_READ = "response_read"
    UNEXPECTED_STATUS_CODE = "unexpected_status_code"


class ElasticsearchClientError(Exception):
    """Base class for all client call failures."""

    kind: ErrorKind

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class PathBuildError(ElasticsearchClientError):
    """The target path or request could not be built; nothing was sent."""

    kind = ErrorKind.PATH_BUILD


class SigningError(ElasticsearchClientError):
    """Request signing failed; nothing was sent."""

    kind = ErrorKind.SIGNING


class TransportError(ElasticsearchClientError):
    """Network failure, retries exhausted or the call was cancelled."""

    kind = ErrorKind.TRANSPORT


class ResponseReadError(ElasticsearchClientError):
    """A response arrived but its body could not be read in full."""

    kind = ErrorKind.RESPONSE_READ


class UnexpectedStatusCodeError(ElasticsearchClientError):
    """The response status fell outside ``[200, 300)``."""

    kind = ErrorKind.UNEXPECTED_STATUS_CODE
    message = "unexpected status code from api"

    def __init__(self, status_code: int) -> None:
        super().__init__(self.message, status_code=status_code)
