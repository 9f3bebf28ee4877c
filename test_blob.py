from __future__ import annotations

import asyncio
import io
import unittest

from ebl.blob import (
    AsyncBlobReader,
    BlobReader,
    copy_blob,
    copy_blob_async,
    skip_blob,
    skip_blob_async,
)
from ebl.errors import TruncatedStream

from ebltestutil import TrickleIO, make_reader


class _Sink:
    def __init__(self):
        self.chunks = []

    def write(self, b: bytes) -> None:
        self.chunks.append(b)


class _DrainingSink(_Sink):
    def __init__(self):
        super().__init__()
        self.drains = 0

    async def drain(self) -> None:
        self.drains += 1


class BlobReaderTests(unittest.TestCase):
    def test_read_is_bounded(self):
        f = io.BytesIO(b"0123456789NEXT")
        blob = BlobReader(f, 10)
        self.assertEqual(blob.read(4), b"0123")
        self.assertEqual(blob.remaining, 6)
        self.assertEqual(blob.read(), b"456789")
        self.assertEqual(blob.read(), b"")
        self.assertEqual(f.read(), b"NEXT")

    def test_drain_skips_rest_in_chunks(self):
        f = TrickleIO(b"a" * 50 + b"tail", step=7)
        blob = BlobReader(f, 50, chunk_size=8)
        blob.read(5)
        self.assertEqual(blob.drain(), 45)
        self.assertEqual(blob.remaining, 0)
        self.assertEqual(f.getvalue()[f.tell():], b"tail")

    def test_truncated_blob(self):
        blob = BlobReader(io.BytesIO(b"abc"), 5)
        with self.assertRaises(TruncatedStream) as ctx:
            blob.drain()
        self.assertEqual(ctx.exception.field, "blob")
        self.assertEqual((ctx.exception.expected, ctx.exception.got), (5, 3))

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            BlobReader(io.BytesIO(), -1)
        with self.assertRaises(ValueError):
            BlobReader(io.BytesIO(), 1, chunk_size=0)

    def test_skip_and_copy(self):
        f = io.BytesIO(b"x" * 10 + b"y" * 10)
        self.assertEqual(skip_blob(f, 10, chunk_size=3), 10)
        sink = _Sink()
        self.assertEqual(copy_blob(f, 10, sink, chunk_size=4), 10)
        self.assertEqual(b"".join(sink.chunks), b"y" * 10)
        self.assertTrue(all(len(c) <= 4 for c in sink.chunks))

    def test_zero_length_blob(self):
        f = io.BytesIO(b"rest")
        self.assertEqual(skip_blob(f, 0), 0)
        self.assertEqual(f.tell(), 0)


class AsyncBlobReaderTests(unittest.IsolatedAsyncioTestCase):
    async def test_read_and_drain(self):
        reader = make_reader(b"hello world!after")
        blob = AsyncBlobReader(reader, 12, chunk_size=5)
        self.assertEqual(await blob.read(5), b"hello")
        self.assertEqual(await blob.drain(), 7)
        self.assertEqual(await reader.read(), b"after")

    async def test_truncated(self):
        with self.assertRaises(TruncatedStream):
            await skip_blob_async(make_reader(b"short"), 6)

    async def test_copy_to_draining_sink(self):
        reader = make_reader(b"z" * 9)
        sink = _DrainingSink()
        self.assertEqual(await copy_blob_async(reader, 9, sink, chunk_size=4), 9)
        self.assertEqual(b"".join(sink.chunks), b"z" * 9)
        self.assertEqual(sink.drains, 3)

    async def test_waits_for_late_bytes(self):
        reader = make_reader(b"ab", eof=False)
        task = asyncio.ensure_future(skip_blob_async(reader, 4))
        await asyncio.sleep(0)
        self.assertFalse(task.done())
        reader.feed_data(b"cd")
        self.assertEqual(await task, 4)


if __name__ == "__main__":
    unittest.main()
