from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .constants import (
    FIELD_BLOB,
    FIELD_BLOB_LEN,
    FIELD_ID,
    FIELD_ID_LEN,
    FIELD_NONCE,
    FIELD_NONCE_LEN,
    MAX_BLOB_LEN,
    MAX_ID_LEN,
    MAX_NONCE_LEN,
)
from .errors import TruncatedStream
from .fields import (
    be_u16,
    be_u64,
    check_len,
    read_exact,
    read_exact_async,
    read_partial,
    read_partial_async,
)


# Record header layout (big-endian):
#  - nonce_len u16, nonce[nonce_len]
#  - id_len u16, id[id_len]
#  - blob_len u64
# The blob itself follows and is not part of the header.
_LEN16_SIZE = 2
_LEN64_SIZE = 8


@dataclass(frozen=True)
class RecordHeader:
    nonce: bytes
    id: bytes
    blob_len: int

    def __post_init__(self):
        check_len(FIELD_NONCE, len(self.nonce), MAX_NONCE_LEN)
        check_len(FIELD_ID, len(self.id), MAX_ID_LEN)
        if self.blob_len < 0:
            raise ValueError("blob_len must be non-negative")
        check_len(FIELD_BLOB, self.blob_len, MAX_BLOB_LEN)

    @property
    def header_size(self) -> int:
        """Number of encoded bytes this header occupied in the stream."""
        return _LEN16_SIZE + len(self.nonce) + _LEN16_SIZE + len(self.id) + _LEN64_SIZE


def _nonce_len(raw: bytes) -> Optional[int]:
    # Zero bytes at the record boundary is the clean end of the sequence;
    # anything between one and two bytes is truncation.
    if not raw:
        return None
    if len(raw) != _LEN16_SIZE:
        raise TruncatedStream(FIELD_NONCE_LEN, _LEN16_SIZE, len(raw))
    return check_len(FIELD_NONCE, be_u16(raw), MAX_NONCE_LEN)


def read_record_header(f: BinaryIO) -> Optional[RecordHeader]:
    """Decode one record header, or return None on a clean end of stream.

    On success the stream is positioned at the first blob byte. The caller
    must consume exactly ``blob_len`` bytes before calling again; a stream
    that is not advanced past the blob desynchronises and later headers
    decode as garbage. Errors leave the stream unusable.
    """
    nonce_len = _nonce_len(read_partial(f, _LEN16_SIZE, FIELD_NONCE_LEN))
    if nonce_len is None:
        return None
    nonce = read_exact(f, nonce_len, FIELD_NONCE)

    id_len = check_len(FIELD_ID, be_u16(read_exact(f, _LEN16_SIZE, FIELD_ID_LEN)), MAX_ID_LEN)
    rec_id = read_exact(f, id_len, FIELD_ID)

    blob_len = check_len(FIELD_BLOB, be_u64(read_exact(f, _LEN64_SIZE, FIELD_BLOB_LEN)), MAX_BLOB_LEN)
    return RecordHeader(nonce=nonce, id=rec_id, blob_len=blob_len)


async def read_record_header_async(reader: asyncio.StreamReader) -> Optional[RecordHeader]:
    """Async counterpart of :func:`read_record_header` over an asyncio stream.

    If the await is cancelled mid-field the partial field is dropped and the
    reader's position is undefined; do not decode further from it.
    """
    nonce_len = _nonce_len(await read_partial_async(reader, _LEN16_SIZE, FIELD_NONCE_LEN))
    if nonce_len is None:
        return None
    nonce = await read_exact_async(reader, nonce_len, FIELD_NONCE)

    id_len = check_len(FIELD_ID, be_u16(await read_exact_async(reader, _LEN16_SIZE, FIELD_ID_LEN)), MAX_ID_LEN)
    rec_id = await read_exact_async(reader, id_len, FIELD_ID)

    blob_len = check_len(
        FIELD_BLOB, be_u64(await read_exact_async(reader, _LEN64_SIZE, FIELD_BLOB_LEN)), MAX_BLOB_LEN
    )
    return RecordHeader(nonce=nonce, id=rec_id, blob_len=blob_len)
