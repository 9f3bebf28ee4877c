"""Fixed-size field primitives shared by the preamble and record readers.

Every read goes through ``read_partial``/``read_partial_async``, which report
how many bytes actually arrived before end-of-stream. The record reader relies
on that count to tell a clean end (zero bytes) from truncation (some bytes).
"""

from __future__ import annotations

import asyncio
import errno
import struct
from typing import BinaryIO

from .errors import FieldTooLarge, StreamReadError, TruncatedStream


_U16_BE = struct.Struct(">H")
_U64_BE = struct.Struct(">Q")


def read_partial(f: BinaryIO, n: int, field: str) -> bytes:
    """Read up to ``n`` bytes, stopping early only at end-of-stream.

    ``f`` must be blocking: a ``read`` returning None raises StreamReadError.
    """
    buf = bytearray()
    while len(buf) < n:
        try:
            chunk = f.read(n - len(buf))
        except OSError as exc:
            raise StreamReadError(field, exc) from exc
        if chunk is None:
            # non-blocking stream with nothing ready; not an end of stream
            exc = BlockingIOError(errno.EAGAIN, "no data ready on non-blocking stream")
            raise StreamReadError(field, exc) from exc
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


async def read_partial_async(reader: asyncio.StreamReader, n: int, field: str) -> bytes:
    try:
        return await reader.readexactly(n)
    except asyncio.IncompleteReadError as exc:
        return exc.partial
    except OSError as exc:
        raise StreamReadError(field, exc) from exc


def read_exact(f: BinaryIO, n: int, field: str) -> bytes:
    b = read_partial(f, n, field)
    if len(b) != n:
        raise TruncatedStream(field, n, len(b))
    return b


async def read_exact_async(reader: asyncio.StreamReader, n: int, field: str) -> bytes:
    b = await read_partial_async(reader, n, field)
    if len(b) != n:
        raise TruncatedStream(field, n, len(b))
    return b


def be_u16(raw: bytes) -> int:
    return _U16_BE.unpack(raw)[0]


def be_u64(raw: bytes) -> int:
    return _U64_BE.unpack(raw)[0]


def check_len(field: str, value: int, limit: int) -> int:
    if value > limit:
        raise FieldTooLarge(field, value, limit)
    return value
