from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from botocore.credentials import Credentials

import es_index_client.signer as signer_module
from es_index_client.errors import SigningError
from es_index_client.signer import SigV4Signer, new_signer

TIMESTAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def static_credentials(token=None):
    return lambda: Credentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY", token)


def put_request(body=b'{"settings":{}}'):
    return httpx.Request(
        "PUT",
        "https://search-domain.eu-west-1.es.amazonaws.com/topics",
        content=body,
        headers={"Content-Type": "application/json"},
    )


def test_sign_adds_sigv4_headers_at_given_timestamp():
    signer = SigV4Signer("eu-west-1", "es", static_credentials())
    request = put_request()

    signer.sign(request, io.BytesIO(request.content), TIMESTAMP)

    assert request.headers["X-Amz-Date"] == "20240102T030405Z"
    authorization = request.headers["Authorization"]
    assert authorization.startswith(
        "AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20240102/eu-west-1/es/aws4_request"
    )
    assert "SignedHeaders=" in authorization
    assert "Signature=" in authorization
    assert "X-Amz-Security-Token" not in request.headers


def test_sign_leaves_request_body_and_reader_position_intact():
    signer = SigV4Signer("eu-west-1", "es", static_credentials())
    request = put_request()
    reader = io.BytesIO(request.content)

    signer.sign(request, reader, TIMESTAMP)

    assert request.content == b'{"settings":{}}'
    assert reader.tell() == 0


def test_signature_depends_on_body():
    signer = SigV4Signer("eu-west-1", "es", static_credentials())
    first = put_request(b'{"a":1}')
    second = put_request(b'{"a":2}')

    signer.sign(first, io.BytesIO(first.content), TIMESTAMP)
    signer.sign(second, io.BytesIO(second.content), TIMESTAMP)

    assert first.headers["Authorization"] != second.headers["Authorization"]


def test_signature_depends_on_timestamp():
    signer = SigV4Signer("eu-west-1", "es", static_credentials())
    first = put_request()
    second = put_request()

    signer.sign(first, io.BytesIO(first.content), TIMESTAMP)
    signer.sign(second, io.BytesIO(second.content), TIMESTAMP + timedelta(seconds=1))

    assert first.headers["Authorization"] != second.headers["Authorization"]


def test_naive_timestamp_treated_as_utc():
    signer = SigV4Signer("eu-west-1", "es", static_credentials())
    request = httpx.Request("DELETE", "https://search.example.com/topics")

    signer.sign(request, None, datetime(2024, 1, 2, 3, 4, 5))

    assert request.headers["X-Amz-Date"] == "20240102T030405Z"


def test_session_token_is_forwarded():
    signer = SigV4Signer("eu-west-1", "es", static_credentials(token="session-token"))
    request = put_request()

    signer.sign(request, io.BytesIO(request.content), TIMESTAMP)

    assert request.headers["X-Amz-Security-Token"] == "session-token"


def test_missing_credentials_raise_signing_error():
    signer = SigV4Signer("eu-west-1", "es", lambda: None)

    with pytest.raises(SigningError):
        signer.sign(put_request(), None, TIMESTAMP)


def test_env_variant_reads_environment(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIDENV")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)
    monkeypatch.delenv("AWS_SECURITY_TOKEN", raising=False)
    signer = new_signer(False, "es", "eu-west-1")
    request = put_request()

    signer.sign(request, io.BytesIO(request.content), TIMESTAMP)

    assert "Credential=AKIDENV/20240102/eu-west-1/es/aws4_request" in request.headers["Authorization"]


def test_sdk_variant_uses_botocore_session(monkeypatch):
    class FakeSession:
        def get_credentials(self):
            return Credentials("AKIDSDK", "secret")

    monkeypatch.setattr(signer_module, "Session", FakeSession)
    signer = new_signer(True, "aoss", "us-east-1")
    request = put_request()

    signer.sign(request, io.BytesIO(request.content), TIMESTAMP)

    assert "Credential=AKIDSDK/20240102/us-east-1/aoss/aws4_request" in request.headers["Authorization"]
