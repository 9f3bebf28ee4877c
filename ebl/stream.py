"""Stateful record streams.

``RecordStream`` and ``AsyncRecordStream`` drive the low-level readers and
enforce their call discipline: the preamble is read exactly once and first,
unread blob bytes are skipped before the next header, and once an error (or a
cancellation) escapes, the stream refuses further use because its position is
no longer known.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass
from typing import AsyncIterator, BinaryIO, Iterator, Optional, Union

from .blob import AsyncBlobReader, BlobReader
from .constants import DEFAULT_COPY_CHUNK, PREAMBLE_SIZE
from .errors import StreamStateError
from .preamble import read_preamble, read_preamble_async
from .records import RecordHeader, read_record_header, read_record_header_async


@dataclass
class Record:
    header: RecordHeader
    blob: Union[BlobReader, AsyncBlobReader]


class _StreamState:
    def __init__(self, chunk_size: int):
        self.chunk_size = chunk_size
        self.records_read: int = 0
        self.record_offset: int = 0
        self.record_index: int = 0
        self._offset: int = 0
        self._preamble_done = False
        self._finished = False
        self._failed = False
        self._blob = None

    @property
    def offset(self) -> int:
        """Bytes consumed from the underlying stream so far."""
        if self._blob is None:
            return self._offset
        return self._offset + self._blob.length - self._blob.remaining

    @property
    def has_preamble(self) -> bool:
        return self._preamble_done

    @property
    def finished(self) -> bool:
        return self._finished

    def _check_usable(self) -> None:
        if self._failed:
            raise StreamStateError("stream is unusable after an earlier error")

    def _check_preamble(self) -> None:
        self._check_usable()
        if self._preamble_done:
            raise StreamStateError("preamble already read")

    def _check_records(self) -> None:
        self._check_usable()
        if not self._preamble_done:
            raise StreamStateError("preamble must be read before records")

    def _preamble_read(self) -> None:
        self._preamble_done = True
        self._offset = PREAMBLE_SIZE

    def _blob_done(self) -> None:
        if self._blob is not None:
            self._offset += self._blob.length
            self._blob = None
        self.record_offset = self._offset
        self.record_index = self.records_read

    def _header_read(self, header: Optional[RecordHeader], blob_factory) -> Optional[Record]:
        if header is None:
            self._finished = True
            return None
        self._offset += header.header_size
        self._blob = blob_factory(header.blob_len)
        self.records_read += 1
        return Record(header=header, blob=self._blob)


class RecordStream(_StreamState):
    """Sequential record decoder over a blocking binary file-like object."""

    def __init__(self, f: BinaryIO, *, chunk_size: int = DEFAULT_COPY_CHUNK):
        super().__init__(chunk_size)
        self.f = f

    def read_preamble(self) -> None:
        self._check_preamble()
        try:
            read_preamble(self.f)
        except BaseException:
            self._failed = True
            raise
        self._preamble_read()

    def next_record(self) -> Optional[Record]:
        """Return the next record, or None once the stream ended cleanly.

        Whatever the caller left unread of the previous record's blob is
        skipped first.
        """
        self._check_records()
        if self._finished:
            return None
        try:
            if self._blob is not None:
                self._blob.drain()
            self._blob_done()
            header = read_record_header(self.f)
        except BaseException:
            self._failed = True
            raise
        return self._header_read(header, lambda n: BlobReader(self.f, n, chunk_size=self.chunk_size))

    def __iter__(self) -> Iterator[Record]:
        if not self._preamble_done:
            self.read_preamble()
        while True:
            record = self.next_record()
            if record is None:
                return
            yield record


class AsyncRecordStream(_StreamState):
    """Sequential record decoder over an ``asyncio.StreamReader``.

    Only one coroutine may use a stream at a time; a concurrent call raises
    StreamStateError instead of interleaving reads.
    """

    def __init__(self, reader: asyncio.StreamReader, *, chunk_size: int = DEFAULT_COPY_CHUNK):
        super().__init__(chunk_size)
        self.reader = reader
        self._busy = False

    def _enter(self) -> None:
        if self._busy:
            raise StreamStateError("stream is already being read by another task")
        self._busy = True

    def _leave(self) -> None:
        self._busy = False

    async def read_preamble(self) -> None:
        self._check_preamble()
        self._enter()
        try:
            await read_preamble_async(self.reader)
        except BaseException:
            self._failed = True
            raise
        finally:
            self._leave()
        self._preamble_read()

    async def next_record(self) -> Optional[Record]:
        self._check_records()
        if self._finished:
            return None
        self._enter()
        try:
            if self._blob is not None:
                await self._blob._drain()
            self._blob_done()
            header = await read_record_header_async(self.reader)
        except BaseException:
            # includes CancelledError: a half-read field cannot be resumed
            self._failed = True
            raise
        finally:
            self._leave()
        return self._header_read(
            header, lambda n: AsyncBlobReader(self.reader, n, chunk_size=self.chunk_size, owner=self)
        )

    async def __aiter__(self) -> AsyncIterator[Record]:
        if not self._preamble_done:
            await self.read_preamble()
        while True:
            record = await self.next_record()
            if record is None:
                return
            yield record


@contextmanager
def open_stream(path: str, *, chunk_size: int = DEFAULT_COPY_CHUNK) -> Iterator[RecordStream]:
    """Open an EBL0 file for reading; the file is closed on exit."""
    with open(path, "rb") as f:
        yield RecordStream(f, chunk_size=chunk_size)
