"""Request payload encoding."""

from __future__ import annotations

import json
from typing import Any, Optional, Union

from pydantic import BaseModel

Payload = Union[bytes, bytearray, memoryview, str, dict, list, BaseModel]


def encode_payload(payload: Optional[Payload]) -> Optional[bytes]:
    """Turn a payload into the exact bytes sent on the wire.

    ``bytes`` pass through untouched so callers keep full control of the
    JSON they send.  ``None`` means "no body".
    """
    if payload is None:
        return None
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, (bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(exclude_none=True).encode("utf-8")
    if isinstance(payload, (dict, list)):
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


def preview(data: Any, limit: int = 1000) -> str:
    """Short printable form of a payload for log records."""
    if data is None:
        return ""
    if isinstance(data, (bytes, bytearray)):
        text = bytes(data).decode("utf-8", errors="replace")
    else:
        text = str(data)
    if len(text) > limit:
        return text[:limit] + "...(truncated)"
    return text
