from __future__ import annotations

import io
import unittest

from ebl.errors import BadMagic, TruncatedStream, UnsupportedVersion
from ebl.preamble import read_preamble, read_preamble_async

from ebltestutil import TrickleIO, encode_preamble, make_reader


class PreambleTests(unittest.TestCase):
    def test_valid_preamble_advances_five_bytes(self):
        f = io.BytesIO(encode_preamble() + b"\xAA\xBB")
        self.assertIsNone(read_preamble(f))
        self.assertEqual(f.tell(), 5)

    def test_valid_preamble_over_short_reads(self):
        f = TrickleIO(encode_preamble())
        read_preamble(f)
        self.assertEqual(f.tell(), 5)

    def test_bad_magic_regardless_of_version_byte(self):
        for magic in (b"EBL1", b"\x00\x00\x00\x00", b"ebl0", b"LBE0"):
            for version in (0, 1, 2, 255):
                with self.subTest(magic=magic, version=version):
                    with self.assertRaises(BadMagic) as ctx:
                        read_preamble(io.BytesIO(magic + bytes([version])))
                    self.assertEqual(ctx.exception.magic, magic)

    def test_bad_magic_checked_before_version_is_read(self):
        f = io.BytesIO(b"XXXX")
        with self.assertRaises(BadMagic):
            read_preamble(f)

    def test_unsupported_version(self):
        for version in (0, 2, 0x7F, 0xFF):
            with self.subTest(version=version):
                with self.assertRaises(UnsupportedVersion) as ctx:
                    read_preamble(io.BytesIO(encode_preamble(version=version)))
                self.assertEqual(ctx.exception.version, version)

    def test_empty_stream_is_truncation(self):
        with self.assertRaises(TruncatedStream) as ctx:
            read_preamble(io.BytesIO(b""))
        self.assertEqual(ctx.exception.field, "magic")
        self.assertEqual(ctx.exception.got, 0)

    def test_short_preamble_is_truncation(self):
        data = encode_preamble()
        for cut in range(1, 4):
            with self.subTest(cut=cut):
                with self.assertRaises(TruncatedStream) as ctx:
                    read_preamble(io.BytesIO(data[:cut]))
                self.assertEqual(ctx.exception.field, "magic")
                self.assertEqual(ctx.exception.got, cut)

    def test_missing_version_byte(self):
        with self.assertRaises(TruncatedStream) as ctx:
            read_preamble(io.BytesIO(b"EBL0"))
        self.assertEqual(ctx.exception.field, "version")
        self.assertEqual(ctx.exception.got, 0)


class AsyncPreambleTests(unittest.IsolatedAsyncioTestCase):
    async def test_valid_preamble(self):
        reader = make_reader(encode_preamble() + b"\x00\x10")
        await read_preamble_async(reader)
        self.assertEqual(await reader.read(), b"\x00\x10")

    async def test_bad_magic(self):
        with self.assertRaises(BadMagic):
            await read_preamble_async(make_reader(b"ABCD\x01"))

    async def test_unsupported_version(self):
        with self.assertRaises(UnsupportedVersion):
            await read_preamble_async(make_reader(b"EBL0\x02"))

    async def test_truncated(self):
        with self.assertRaises(TruncatedStream) as ctx:
            await read_preamble_async(make_reader(b"EBL0"))
        self.assertEqual(ctx.exception.field, "version")


if __name__ == "__main__":
    unittest.main()
