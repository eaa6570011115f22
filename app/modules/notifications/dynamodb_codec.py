"""DynamoDB attribute-value conversion for notification rows and documents."""

import base64
import binascii
import json
from decimal import Decimal
from typing import Any, Dict, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from modules.notifications.errors import InvalidArgumentError

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, set):
        return {_plain(v) for v in value}
    return value


def _dynamo_ready(value: Any) -> Any:
    # TypeSerializer rejects floats
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, list):
        return [_dynamo_ready(v) for v in value]
    if isinstance(value, dict):
        return {k: _dynamo_ready(v) for k, v in value.items()}
    return value


def serialize_value(value: Any) -> Dict[str, Any]:
    return _serializer.serialize(_dynamo_ready(value))


def serialize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {key: serialize_value(value) for key, value in item.items()}


def deserialize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _plain(_deserializer.deserialize(value)) for key, value in item.items()}


def encode_continuation_token(key: Optional[Dict[str, Any]]) -> str:
    """Encode a store position as an opaque token; empty string for none."""
    if not key:
        return ""
    raw = json.dumps(key, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_continuation_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a token produced by ``encode_continuation_token``.

    Raises:
        InvalidArgumentError: If the token is not one this service issued.
    """
    if not token:
        return None
    try:
        decoded = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid continuation token: {token!r}") from exc
    if not isinstance(decoded, dict):
        raise InvalidArgumentError(f"Invalid continuation token: {token!r}")
    return decoded
