"""Listing Cursor — opaque keyset cursor encoding."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from maintainership.core.cursor import Cursor, decode_cursor, encode_cursor
from maintainership.core.domain_types import MaintainerEntry, MaintainershipId
from maintainership.core.errors import InvalidCursorError


def test_cursor_survives_encoding():
    cursor = Cursor(
        datetime(2026, 3, 4, 5, 6, 7, 890, tzinfo=timezone.utc),
        MaintainershipId(uuid4()),
    )
    assert decode_cursor(encode_cursor(cursor)) == cursor


def test_encoded_cursor_is_url_safe():
    token = encode_cursor(Cursor(datetime(2026, 1, 1), MaintainershipId(uuid4())))
    assert "=" not in token
    assert "/" not in token and "+" not in token


def test_cursor_after_entry():
    entry = MaintainerEntry(MaintainershipId(uuid4()), "bob", datetime(2026, 1, 1))
    cursor = Cursor.after(entry)
    assert cursor.record_id == entry.record_id
    assert cursor.accepted_at == entry.accepted_at


@pytest.mark.parametrize("token", ["", "not-base64!!", "e30", "eyJ0IjoxfQ"])
def test_garbage_cursor_rejected(token):
    with pytest.raises(InvalidCursorError):
        decode_cursor(token)
