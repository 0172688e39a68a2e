"""Tests for record body decoding."""

import base64
import json

import pytest

from abtrack.services.batch_decoder import decode_record_data
from abtrack.utils.exceptions import DecodeError


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


class TestDecodeRecordData:
    """Tests for decode_record_data."""

    def test_single_object(self):
        """Test that one event object becomes a one-element list."""
        data = _b64(json.dumps({"eventType": "SESSION_START"}).encode())

        assert decode_record_data(data) == [{"eventType": "SESSION_START"}]

    def test_array_keeps_order(self):
        """Test that an array body is returned in payload order."""
        events = [{"n": 1}, {"n": 2}, {"n": 3}]
        data = _b64(json.dumps(events).encode())

        assert decode_record_data(data) == events

    def test_non_object_elements_returned(self):
        """Test that element validation is left to the caller."""
        data = _b64(json.dumps([{"n": 1}, "oops", 7]).encode())

        assert decode_record_data(data) == [{"n": 1}, "oops", 7]

    def test_empty_array(self):
        """Test that an empty array yields no events."""
        assert decode_record_data(_b64(b"[]")) == []

    def test_unicode_body(self):
        """Test UTF-8 decoding of non-ASCII content."""
        data = _b64(json.dumps({"goalName": "Sepete ekle ğüş"}, ensure_ascii=False).encode("utf-8"))

        assert decode_record_data(data) == [{"goalName": "Sepete ekle ğüş"}]

    @pytest.mark.parametrize(
        "data,stage",
        [
            ("not base64!!", "base64"),
            (None, "base64"),
            (_b64(b"\xff\xfe\xfa"), "utf-8"),
            (_b64(b"{not json"), "json"),
        ],
    )
    def test_decode_failures(self, data, stage):
        """Test that each decoding stage reports its own failure."""
        with pytest.raises(DecodeError) as exc_info:
            decode_record_data(data)

        assert exc_info.value.stage == stage
        assert exc_info.value.error_code == "DECODE_ERROR"
