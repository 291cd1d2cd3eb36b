import struct
import unittest

from rbbf_converter.BinaryReader import BinaryReader
from rbbf_converter.errors import MalformedHeaderError, MalformedBlockHeaderError
from rbbf_converter.header import (
    read_container_header, read_block_header, BlockHeader, DEFAULT_MIN_IDE_VERSION,
)

from rbbf_builder import container_header, block, tag, i32


class ContainerHeaderTest(unittest.TestCase):
    def test_format_2(self):
        header = read_container_header(BinaryReader(container_header(2, min_ide_version=201901)))

        self.assertEqual(header.format_version, 2)
        self.assertEqual(header.min_ide_version, 201901)
        self.assertEqual(header.first_block_offset, 24)

    def test_format_2_layout(self):
        reader = BinaryReader(tag('RbBF') + struct.pack('>5i', 2, 0, 0, 24, 201903) + tag('EOF!'))

        header = read_container_header(reader)

        self.assertEqual(header.min_ide_version, 201903)
        self.assertEqual(reader.tell(), 24)
        self.assertEqual(reader.read_tag(), 'EOF!')

    def test_format_1_has_default_min_ide_version(self):
        header = read_container_header(BinaryReader(container_header(1)))

        self.assertEqual(header.format_version, 1)
        self.assertEqual(header.min_ide_version, DEFAULT_MIN_IDE_VERSION)
        self.assertEqual(header.first_block_offset, 20)

    def test_bad_signature(self):
        with self.assertRaises(MalformedHeaderError):
            read_container_header(BinaryReader(tag('XXXX') + container_header(2)[4:]))

    def test_unsupported_version(self):
        with self.assertRaises(MalformedHeaderError):
            read_container_header(BinaryReader(tag('RbBF') + i32(7) + i32(0) * 5))


class BlockHeaderTest(unittest.TestCase):
    def test_read(self):
        reader = BinaryReader(block('Proj', 5, b'\0' * 8, revision=3, key_format=0, key1=9, key2=10))
        reader.read_tag()

        header = read_block_header(reader)

        self.assertEqual(header, BlockHeader('Proj', 5, 3, 40, 0, 9, 10))
        self.assertEqual(header.body_size, 8)
        self.assertFalse(header.is_opaque)

    def test_too_small(self):
        reader = BinaryReader(block('Proj', 5, size_adjust=-1))
        reader.read_tag()

        with self.assertRaises(MalformedBlockHeaderError):
            read_block_header(reader)

    def test_to_bytes_round_trips_the_header(self):
        raw = block('pVew', 7, key_format=2, key1=-1, key2=12345)

        header = BlockHeader('pVew', 7, 1, 32, 2, -1, 12345)

        self.assertEqual(tag('Blok') + header.to_bytes(), raw)

    def test_cleared_keys(self):
        header = BlockHeader('Proj', 1, 1, 32, 0, 4, 5).with_cleared_keys()
        self.assertEqual((header.key1, header.key2), (0, 0))
