"""Fixture builders for the test suite; the package itself does not encode."""

from __future__ import annotations

import asyncio
import io
import struct
from typing import Iterable, Optional, Tuple

from ebl.constants import MAGIC, VERSION


def encode_preamble(magic: bytes = MAGIC, version: int = VERSION) -> bytes:
    return magic + bytes([version])


def encode_header(
    nonce: bytes,
    rec_id: bytes,
    blob_len: int,
    *,
    nonce_len: Optional[int] = None,
    id_len: Optional[int] = None,
) -> bytes:
    """Encode a record header; explicit lengths allow out-of-range fixtures."""
    n = len(nonce) if nonce_len is None else nonce_len
    m = len(rec_id) if id_len is None else id_len
    return struct.pack(">H", n) + nonce + struct.pack(">H", m) + rec_id + struct.pack(">Q", blob_len)


def encode_record(nonce: bytes, rec_id: bytes, blob: bytes) -> bytes:
    return encode_header(nonce, rec_id, len(blob)) + blob


def encode_stream(records: Iterable[Tuple[bytes, bytes, bytes]]) -> bytes:
    return encode_preamble() + b"".join(encode_record(n, i, b) for n, i, b in records)


class TrickleIO(io.BytesIO):
    """BytesIO that hands out at most ``step`` bytes per read, like a socket."""

    def __init__(self, data: bytes, step: int = 1):
        super().__init__(data)
        self.step = step

    def read(self, n=-1):
        if n is None or n < 0:
            n = self.step
        return super().read(min(n, self.step))


class FailingIO(io.BytesIO):
    """BytesIO that raises ConnectionResetError once ``fail_at`` bytes were served."""

    def __init__(self, data: bytes, fail_at: int):
        super().__init__(data)
        self.fail_at = fail_at

    def read(self, n=-1):
        if self.tell() >= self.fail_at:
            raise ConnectionResetError("peer reset")
        if n is None or n < 0:
            n = self.fail_at - self.tell()
        return super().read(min(n, self.fail_at - self.tell()))


class NonBlockingIO:
    """Raw stream in non-blocking mode with nothing ready: ``read`` returns None."""

    def read(self, n=-1):
        return None


class ResetReader:
    """StreamReader stand-in whose transport was reset by the peer."""

    async def readexactly(self, n):
        raise ConnectionResetError("peer reset")


def make_reader(data: bytes, *, eof: bool = True) -> asyncio.StreamReader:
    """Build a fed StreamReader; call from inside a running event loop."""
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader
