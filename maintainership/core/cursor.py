"""Listing Cursor — opaque keyset position in the active-maintainers listing.

Invariants:
    - A cursor encodes (accepted_at, record id) of the last item on a page
    - decode_cursor(encode_cursor(x)) == x; anything else raises InvalidCursorError

Design Decisions:
    - Keyset over offset: concurrent accepts/removals do not shift later pages
    - URL-safe base64 of compact JSON, without padding
"""

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from maintainership.core.domain_types import MaintainerEntry, MaintainershipId
from maintainership.core.errors import InvalidCursorError


@dataclass(frozen=True)
class Cursor:
    accepted_at: datetime
    record_id: MaintainershipId

    @classmethod
    def after(cls, entry: MaintainerEntry) -> "Cursor":
        return cls(entry.accepted_at, entry.record_id)


def encode_cursor(cursor: Cursor) -> str:
    payload = json.dumps(
        {"t": cursor.accepted_at.isoformat(), "id": str(cursor.record_id)},
        separators=(",", ":"),
    )
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(token: str) -> Cursor:
    padded = token + "=" * (-len(token) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode()))
        return Cursor(
            datetime.fromisoformat(data["t"]),
            MaintainershipId(UUID(data["id"])),
        )
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(token) from e
