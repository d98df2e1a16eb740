"""
Wire encoding helpers: unpadded base64url and compact JSON.

Tokens are ``b64url(json(header)) "." b64url(json(payload)) "." signature``.
"""
import binascii
import json
import re
from typing import Any, Dict, Union

from jwt.utils import base64url_decode, base64url_encode

from .exceptions import EncodingError, MalformedTokenError

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(data: bytes) -> str:
    """
    URL-safe base64 encoding WITHOUT padding.

    Args:
        data: Raw bytes to encode

    Returns:
        ASCII string over the ``A-Z a-z 0-9 - _`` alphabet
    """
    return base64url_encode(data).decode("ascii")


def b64url_decode(value: Union[str, bytes]) -> bytes:
    """
    Decode unpadded URL-safe base64.

    Unlike ``base64.urlsafe_b64decode`` this refuses characters outside the
    URL-safe alphabet instead of silently discarding them.

    Args:
        value: base64url string (padding optional)

    Returns:
        Decoded bytes

    Raises:
        MalformedTokenError: If the value is not valid base64url
    """
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedTokenError("Invalid base64url data") from e

    value = value.rstrip("=")
    if not _B64URL_RE.fullmatch(value) or len(value) % 4 == 1:
        raise MalformedTokenError("Invalid base64url data")

    try:
        return base64url_decode(value)
    except (binascii.Error, ValueError) as e:
        raise MalformedTokenError("Invalid base64url data") from e


def json_encode(obj: Dict[str, Any]) -> bytes:
    """
    Serialize a claims map to compact JSON.

    Key order is kept as inserted so the same map always produces the same
    bytes (and therefore the same signature).

    Raises:
        EncodingError: If the map holds values JSON cannot represent
    """
    try:
        return json.dumps(obj, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot JSON encode token part: {e}") from e


def _reject_constant(name: str) -> Any:
    raise MalformedTokenError(f"Token part contains non-JSON constant {name}")


def json_decode(data: bytes) -> Dict[str, Any]:
    """
    Parse a JSON object.

    Raises:
        MalformedTokenError: If the data is not UTF-8 JSON or not a JSON object,
            or uses NaN/Infinity
    """
    try:
        obj = json.loads(data.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedTokenError("Token part is not valid JSON") from e

    if not isinstance(obj, dict):
        raise MalformedTokenError("Token part is not a JSON object")
    return obj


def encode_segment(obj: Dict[str, Any]) -> str:
    """JSON encode then base64url encode one token part."""
    return b64url_encode(json_encode(obj))


def decode_segment(segment: str) -> Dict[str, Any]:
    """base64url decode then JSON decode one token part."""
    return json_decode(b64url_decode(segment))
