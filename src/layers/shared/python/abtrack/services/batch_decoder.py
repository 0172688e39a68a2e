"""Decoding of delivered batch records into event payloads."""

import base64
import binascii
import json
from typing import Any

from abtrack.utils.exceptions import DecodeError


def decode_record_data(data: str | bytes) -> list[Any]:
    """Decode one record body into a list of raw event values.

    The body is base64 text holding UTF-8 JSON: either one event object or
    an array of them. Elements are returned as decoded, whatever their type;
    validating them is the caller's job.

    Args:
        data: The record's base64 ``data`` field.

    Returns:
        Decoded event values, in payload order.

    Raises:
        DecodeError: If any decoding stage fails.
    """
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeError(f"Record body is not valid base64: {e}", stage="base64")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Record body is not valid UTF-8: {e}", stage="utf-8")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Record body is not valid JSON: {e}", stage="json")

    if isinstance(parsed, list):
        return parsed
    return [parsed]
