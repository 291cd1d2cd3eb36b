import unittest

from io import BytesIO

from rbbf_converter.BinaryReader import BinaryReader, BinaryReaderMissingDataError, BinaryReaderReadPastEndError


class ReadIntsTest(unittest.TestCase):
    def test_big_endian(self):
        reader = BinaryReader(b'\x00\x00\x01\x02\xff\xff\xff\xfe')
        self.assertEqual(reader.read_int32(), 258)
        self.assertEqual(reader.read_int32(), -2)
        self.assertTrue(reader.eof())

    def test_little_endian(self):
        reader = BinaryReader(b'\x02\x01\x00\x00', big_endian=False)
        self.assertEqual(reader.read_uint32(), 258)

    def test_16_and_64_bit(self):
        reader = BinaryReader(b'\xff\xfe' + b'\x00' * 7 + b'\x05')
        self.assertEqual(reader.read_int16(), -2)
        self.assertEqual(reader.read_uint64(), 5)

    def test_double(self):
        reader = BinaryReader(b'\x3f\xf8\x00\x00\x00\x00\x00\x00')
        self.assertEqual(reader.read_double(), 1.5)


class ReadTagTest(unittest.TestCase):
    def test_big_endian_tag(self):
        self.assertEqual(BinaryReader(b'Blok').read_tag(), 'Blok')

    def test_little_endian_tag_is_reversed(self):
        self.assertEqual(BinaryReader(b'kolB', big_endian=False).read_tag(), 'Blok')

    def test_try_tag_match(self):
        reader = BinaryReader(b'Grup1234')
        self.assertTrue(reader.try_tag('Grup'))
        self.assertEqual(reader.tell(), 4)

    def test_try_tag_mismatch_rewinds(self):
        reader = BinaryReader(b'Strn1234')
        self.assertFalse(reader.try_tag('Grup'))
        self.assertEqual(reader.tell(), 0)
        self.assertEqual(reader.read_tag(), 'Strn')


class EOFTest(unittest.TestCase):
    def test_missing_data(self):
        reader = BinaryReader(b'')
        with self.assertRaises(BinaryReaderMissingDataError):
            reader.read_int32('block ID')

    def test_partial_read_fails(self):
        reader = BinaryReader(b'\x00\x01')
        with self.assertRaises(BinaryReaderReadPastEndError) as ctx:
            reader.read_int32('block ID')

        self.assertEqual(ctx.exception.expected_length, 4)
        self.assertEqual(ctx.exception.actual_length, 2)
        self.assertIn('block ID', str(ctx.exception))

    def test_skip_past_end(self):
        reader = BinaryReader(b'\x00\x01')
        with self.assertRaises(BinaryReaderReadPastEndError):
            reader.skip_bytes(3)

    def test_file_object(self):
        reader = BinaryReader(BytesIO(b'abcdefgh'))
        reader.seek(4)
        self.assertEqual(reader.read_amount(4), b'efgh')
        self.assertTrue(reader.eof())
        self.assertEqual(reader.bytes_remaining(), 0)

    def test_rewind_before_start(self):
        reader = BinaryReader(b'abcd')
        with self.assertRaises(ValueError):
            reader.rewind(1)
