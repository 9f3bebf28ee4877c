"""Collaborator-side helpers for the blob bytes that follow each record header.

The header readers never touch blob bytes. These helpers consume exactly
``blob_len`` bytes in bounded chunks so a declared length, however large,
never turns into a single allocation.
"""

from __future__ import annotations

import asyncio
from typing import BinaryIO

from .constants import DEFAULT_COPY_CHUNK, FIELD_BLOB
from .errors import TruncatedStream
from .fields import read_partial, read_partial_async


def _check_chunk_size(chunk_size: int) -> int:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return chunk_size


class BlobReader:
    """Bounded read-only view over the next ``length`` bytes of ``f``."""

    def __init__(self, f: BinaryIO, length: int, *, chunk_size: int = DEFAULT_COPY_CHUNK):
        if length < 0:
            raise ValueError("length must be non-negative")
        self.f = f
        self.length = length
        self.chunk_size = _check_chunk_size(chunk_size)
        self._consumed = 0

    @property
    def remaining(self) -> int:
        return self.length - self._consumed

    def _take(self, n: int) -> bytes:
        b = read_partial(self.f, n, FIELD_BLOB)
        self._consumed += len(b)
        if len(b) != n:
            raise TruncatedStream(FIELD_BLOB, self.length, self._consumed)
        return b

    def read(self, n: int = -1) -> bytes:
        if n is None or n < 0 or n > self.remaining:
            n = self.remaining
        if n == 0:
            return b""
        return self._take(n)

    def drain(self) -> int:
        """Skip whatever is left of the blob; returns the number of bytes skipped."""
        skipped = 0
        while self.remaining:
            skipped += len(self._take(min(self.chunk_size, self.remaining)))
        return skipped


class AsyncBlobReader:
    """Async counterpart of :class:`BlobReader` over an asyncio stream.

    When ``owner`` is given (an AsyncRecordStream), public reads hold the
    owner's busy flag so they cannot interleave with its header reads.
    """

    def __init__(
        self, reader: asyncio.StreamReader, length: int, *, chunk_size: int = DEFAULT_COPY_CHUNK, owner=None
    ):
        if length < 0:
            raise ValueError("length must be non-negative")
        self.reader = reader
        self.length = length
        self.chunk_size = _check_chunk_size(chunk_size)
        self._consumed = 0
        self._owner = owner

    @property
    def remaining(self) -> int:
        return self.length - self._consumed

    async def _take(self, n: int) -> bytes:
        b = await read_partial_async(self.reader, n, FIELD_BLOB)
        self._consumed += len(b)
        if len(b) != n:
            raise TruncatedStream(FIELD_BLOB, self.length, self._consumed)
        return b

    async def _read(self, n: int) -> bytes:
        if n is None or n < 0 or n > self.remaining:
            n = self.remaining
        if n == 0:
            return b""
        return await self._take(n)

    async def _drain(self) -> int:
        skipped = 0
        while self.remaining:
            skipped += len(await self._take(min(self.chunk_size, self.remaining)))
        return skipped

    async def read(self, n: int = -1) -> bytes:
        if self._owner is None:
            return await self._read(n)
        self._owner._enter()
        try:
            return await self._read(n)
        finally:
            self._owner._leave()

    async def drain(self) -> int:
        if self._owner is None:
            return await self._drain()
        self._owner._enter()
        try:
            return await self._drain()
        finally:
            self._owner._leave()


def skip_blob(f: BinaryIO, length: int, *, chunk_size: int = DEFAULT_COPY_CHUNK) -> int:
    return BlobReader(f, length, chunk_size=chunk_size).drain()


async def skip_blob_async(reader: asyncio.StreamReader, length: int, *, chunk_size: int = DEFAULT_COPY_CHUNK) -> int:
    return await AsyncBlobReader(reader, length, chunk_size=chunk_size).drain()


def copy_blob(f: BinaryIO, length: int, sink, *, chunk_size: int = DEFAULT_COPY_CHUNK) -> int:
    """Copy exactly ``length`` blob bytes from ``f`` into ``sink.write``."""
    blob = BlobReader(f, length, chunk_size=chunk_size)
    while blob.remaining:
        sink.write(blob.read(blob.chunk_size))
    return length


async def copy_blob_async(reader: asyncio.StreamReader, length: int, sink, *, chunk_size: int = DEFAULT_COPY_CHUNK) -> int:
    """Copy exactly ``length`` blob bytes into ``sink``.

    ``sink.write`` is called synchronously; when the sink also has a ``drain``
    coroutine (``asyncio.StreamWriter``) it is awaited after every chunk.
    """
    blob = AsyncBlobReader(reader, length, chunk_size=chunk_size)
    drain = getattr(sink, "drain", None)
    while blob.remaining:
        sink.write(await blob.read(blob.chunk_size))
        if drain is not None:
            await drain()
    return length
