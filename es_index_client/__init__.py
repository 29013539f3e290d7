"""Minimal client for Elasticsearch-compatible index APIs."""

from .client import (
    Client,
    DispatchResult,
    create_client,
    create_client_from_config,
    create_client_with_signing,
    create_client_with_transport,
)
from .connection_settings import SERVICE_NAME, ClientConfig, load_config
from .context import CallContext, background
from .errors import (
    ElasticsearchClientError,
    ErrorKind,
    PathBuildError,
    ResponseReadError,
    SigningError,
    TransportError,
    UnexpectedStatusCodeError,
)
from .payload import encode_payload
from .signer import Signer, SigV4Signer, new_signer
from .transport import RetryingTransport, Transport

__all__ = [
    # client
    "Client",
    "DispatchResult",
    "create_client",
    "create_client_with_transport",
    "create_client_with_signing",
    "create_client_from_config",
    # config
    "SERVICE_NAME",
    "ClientConfig",
    "load_config",
    # context
    "CallContext",
    "background",
    # errors
    "ErrorKind",
    "ElasticsearchClientError",
    "PathBuildError",
    "SigningError",
    "TransportError",
    "ResponseReadError",
    "UnexpectedStatusCodeError",
    # payload
    "encode_payload",
    # signing
    "Signer",
    "SigV4Signer",
    "new_signer",
    # transport
    "Transport",
    "RetryingTransport",
]
