"""
This module contains the `BinaryReader` class, a wrapper for binary I/O streams that offers functions for extracting
the primitives used by the RBBF container format: fixed-size ints, doubles, four-character tags and raw byte runs.

The endianness is fixed when the reader is created. RBBF files are always big-endian on disk, but the reader works
equally well in little-endian mode. Byte order is applied via explicit `struct` prefixes, so the results never depend
on the byte order of the host.
"""

import struct

from typing import Union, BinaryIO, Optional, AnyStr
from io import BytesIO, IOBase, TextIOBase
from os import SEEK_SET, SEEK_CUR, SEEK_END


class BinaryReader:
    """
    This class wraps a binary I/O file object and offers functions for extracting binary-encoded ints, doubles, tags
    and byte runs.

    All reads are all-or-nothing: if the data ends before a complete value could be read, a `BinaryReaderEOFError`
    is raised and no partial value is ever returned.
    """

    _fileobj: BinaryIO
    _big_endian: bool

    _position: int
    _cached_total_size: Optional[int] = None

    def __init__(self, data_or_fileobj: Union[bytes, BinaryIO], big_endian: bool = True):
        self._fileobj = _parse_main_input_arg(data_or_fileobj)
        self._big_endian = big_endian

        self._position = self._fileobj.tell() if self._fileobj.seekable() else 0

    @property
    def big_endian(self) -> bool:
        return self._big_endian

    def name(self) -> Optional[AnyStr]:
        name = getattr(self._fileobj, 'name', None)

        return None if ((name is None) or (name == '')) else name

    def seekable(self) -> bool:
        return self._fileobj.seekable()

    def _require_seekable(self):
        if not self.seekable():
            raise ValueError("This operation can only be performed on seekable readers")

    def seek(self, offset: int, whence: int = SEEK_SET) -> 'BinaryReader':
        self._require_seekable()

        self._fileobj.seek(offset, whence)
        self._position = self._fileobj.tell()

        return self

    def rewind(self, n_bytes: int) -> 'BinaryReader':
        """
        Moves the read position back by `n_bytes`, e.g. to "un-read" a lookahead tag that did not match.
        """
        if n_bytes < 0:
            raise ValueError("Number of bytes to rewind must be non-negative")
        if n_bytes > self._position:
            raise ValueError(f"Cannot rewind {n_bytes} bytes from position {self._position}")

        return self.seek(-n_bytes, SEEK_CUR)

    def tell(self) -> int:
        return self._position

    def total_size(self) -> int:
        self._require_seekable()

        if self._cached_total_size is None:
            original_position = self._fileobj.tell()
            self._fileobj.seek(0, SEEK_END)
            self._cached_total_size = self._fileobj.tell()
            self._fileobj.seek(original_position, SEEK_SET)

        return self._cached_total_size

    def bytes_remaining(self) -> int:
        self._require_seekable()

        return max(0, self.total_size() - self._position)

    def eof(self) -> bool:
        """
        Checks whether the end of the data has been reached, without consuming anything.
        """
        if self.seekable():
            return self.bytes_remaining() == 0

        peek = getattr(self._fileobj, 'peek', None)
        if peek is None:
            raise ValueError("Cannot check for EOF on a non-seekable stream without peek() support")

        return len(peek(1)) == 0

    def read_at_most(self, n_bytes: int) -> bytes:
        """
        Try to read `n_bytes` of data, returning fewer only if the data is exhausted.

        Short reads, e.g. from a pipe, are handled.

        Args:
            n_bytes: The number of bytes to try to read.

        Returns:
            The read data, at most `n_bytes` in length. Note that the function never raises a format error.
        """

        if n_bytes < 0:
            raise ValueError("The number of bytes to read cannot be negative")
        if n_bytes == 0:
            return b''

        data = self._fileobj.read(n_bytes)
        self._position += len(data)

        while len(data) < n_bytes:
            new_data = self._fileobj.read(n_bytes - len(data))

            if len(new_data) == 0:
                break

            self._position += len(new_data)
            data += new_data

        return data

    def read_amount(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        """
        Reads exactly `n_bytes` from the underlying stream.

        Args:
            n_bytes: The amount of bytes to read.
            meaning: An indication as to the meaning of the data being read (e.g. "block body"). It is used in the
                text of any exceptions that may be thrown.

        Returns:
            The data, as a `bytes` object `n_bytes` in length.

        Raises:
            BinaryReaderMissingDataError: If we are at the end of the stream and no bytes are left at all.
            BinaryReaderReadPastEndError: If we read some bytes, but reached the end of the data before we got the
                full `n_bytes`.
        """

        if n_bytes < 0:
            raise ValueError("The number of bytes to read cannot be negative")
        if n_bytes == 0:
            return b''

        original_pos = self._position

        data = self.read_at_most(n_bytes)

        if len(data) == 0:
            raise BinaryReaderMissingDataError(self._position, n_bytes, meaning)
        if len(data) < n_bytes:
            raise BinaryReaderReadPastEndError(original_pos, n_bytes, len(data), meaning)

        return data

    def read_remainder(self) -> bytes:
        """
        Reads all the data left in the stream. Returns an empty `bytes` object if we are already at the end.
        """
        data = self._fileobj.read()
        self._position += len(data)

        return data

    def skip_bytes(self, n_bytes: int, meaning: Optional[str] = None):
        """
        Skips over a number of bytes, ignoring the data. The bytes MUST be present.

        Args:
            n_bytes: The number of bytes to skip.
            meaning: An indication as to the meaning of the data being skipped (e.g. "padding"). It is used in the
                text of any exceptions that may be thrown.

        Raises:
            BinaryReaderMissingDataError: If we are at the end of the stream and no bytes are left at all.
            BinaryReaderReadPastEndError: If we read some bytes, but reached the end of the data before we got the
                full length required.
        """

        if n_bytes < 0:
            raise ValueError("Number of bytes to skip must be non-negative")
        if n_bytes == 0:
            return

        original_pos = self._position

        if self.seekable():
            bytes_avail = self.bytes_remaining()
            if bytes_avail == 0:
                raise BinaryReaderMissingDataError(original_pos, n_bytes, meaning)
            if bytes_avail < n_bytes:
                self.seek(bytes_avail, SEEK_CUR)
                raise BinaryReaderReadPastEndError(original_pos, n_bytes, bytes_avail, meaning)

            self.seek(n_bytes, SEEK_CUR)
            return

        self.read_amount(n_bytes, meaning)

    def try_tag(self, expected: str, meaning: Optional[str] = None) -> bool:
        """
        Checks whether a specific four-character tag follows in the stream. If it does, it is consumed and True is
        returned. If it doesn't, the 4 bytes are "un-read" (the position is restored) and False is returned.

        Note that an exception is still thrown if the data ends before a complete tag could be read.
        """
        if self.read_tag(meaning) == expected:
            return True

        self.rewind(4)
        return False

    def read_struct(self, struct_format: str, meaning: Optional[str] = None) -> tuple:
        """
        Reads structured data from the underlying stream.

        Args:
            struct_format: The format of the structured data, as per the Python `struct` package. There is no need to
                prepend an endianness specifier, as one will be added automatically in accordance to the
                `BinaryReader`'s current setting, but if one is present, it will take precedence.
            meaning: An indication as to the meaning of the data being read (e.g. "block header"). It is used in the
                text of any exceptions that may be thrown.

        Returns:
           The data in the structure, as a tuple.

        Raises:
            BinaryReaderMissingDataError: If we are at the end of the stream and no bytes are left at all.
            BinaryReaderReadPastEndError: If we read some bytes, but reached the end of the data before we got a
                complete structure.
        """

        if struct_format == '':
            return ()
        if struct_format[0] not in '@=<>!':
            struct_format = ('>' if self._big_endian else '<') + struct_format

        meaning = meaning or f"struct ({struct_format})"

        data = self.read_amount(struct.calcsize(struct_format), meaning)

        return struct.unpack(struct_format, data)

    def read_int8(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('b', meaning or 'int8')[0]

    def read_uint8(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('B', meaning or 'uint8')[0]

    def read_int16(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('h', meaning or 'int16')[0]

    def read_uint16(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('H', meaning or 'uint16')[0]

    def read_int32(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('i', meaning or 'int32')[0]

    def read_uint32(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('I', meaning or 'uint32')[0]

    def read_int64(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('q', meaning or 'int64')[0]

    def read_uint64(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('Q', meaning or 'uint64')[0]

    def read_double(self, meaning: Optional[str] = None) -> float:
        return self.read_struct('d', meaning or 'double')[0]

    def read_tag(self, meaning: Optional[str] = None) -> str:
        """
        Reads a four-character tag (a.k.a. FourCC).

        The tag is always stored as the big-endian encoding of a 32-bit int, i.e. its characters appear in reading
        order in a big-endian file. For a little-endian reader the bytes are reversed, so that the same logical tag is
        obtained from a byte-swapped file.

        Returns:
            The tag, as a 4-character string. Each byte maps to one character (Latin-1), so any byte value is
            representable.
        """
        data = self.read_amount(4, meaning or 'tag')

        if not self._big_endian:
            data = data[::-1]

        return data.decode('latin-1')


def _parse_main_input_arg(input_: Union[bytes, BinaryIO]) -> BinaryIO:
    if isinstance(input_, (bytes, bytearray, memoryview)):
        return BytesIO(bytes(input_))

    if not isinstance(input_, IOBase):
        raise TypeError("Input to BinaryReader must be either bytes or a file object")
    if isinstance(input_, TextIOBase):
        raise TypeError("BinaryReader works on binary, not text file objects")

    return input_


class BinaryReaderFormatError(Exception):
    """
    This is used by the `BinaryReader` specifically to signal situations where the data does not match the expected
    format.
    """


class BinaryReaderEOFError(BinaryReaderFormatError):
    """
    Base class for all situations where the data ended before a complete value could be read.
    """
    position: int
    expected_length: int
    meaning: Optional[str]


class BinaryReaderReadPastEndError(BinaryReaderEOFError):
    actual_length: int

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {actual_length} were found"
        )


class BinaryReaderMissingDataError(BinaryReaderEOFError):
    def __init__(self, position: int, expected_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but the data ends"
        )

