"""
Container and block headers of an RBBF file.

Container header layout (all fields are 32-bit, big-endian)::

    signature ('RbBF') | format version | reserved | reserved | offset of first block
    [format 2 only:]   | minimum IDE version

Each block starts with the 'Blok' sentinel, followed by a 28-byte header::

    type tag | ID | revision | block size | key format | key 1 | key 2

The block size counts the sentinel and the header, i.e. the body is ``block_size - 32`` bytes long.
"""

import struct

from dataclasses import dataclass, replace

from .BinaryReader import BinaryReader
from .errors import MalformedHeaderError, MalformedBlockHeaderError
from .tags import SUPPORTED_FORMAT_VERSIONS


RBBF_SIGNATURE = 'RbBF'

BLOCK_SENTINEL = 'Blok'
END_OF_FILE_SENTINEL = 'EOF!'

BLOCK_HEADER_SIZE = 32

DEFAULT_MIN_IDE_VERSION = 201201


@dataclass(frozen=True)
class ContainerHeader:
    signature: str
    format_version: int
    reserved1: int
    reserved2: int
    first_block_offset: int
    min_ide_version: int = DEFAULT_MIN_IDE_VERSION


@dataclass(frozen=True)
class BlockHeader:
    type_tag: str
    block_id: int
    revision: int
    block_size: int
    key_format: int
    key1: int
    key2: int

    @property
    def body_size(self) -> int:
        return self.block_size - BLOCK_HEADER_SIZE

    @property
    def is_opaque(self) -> bool:
        return self.key_format != 0

    def with_cleared_keys(self) -> 'BlockHeader':
        return replace(self, key1=0, key2=0)

    def to_bytes(self) -> bytes:
        """Re-serializes the 28 header bytes that follow the sentinel, in big-endian order."""
        return self.type_tag.encode('latin-1') + struct.pack(
            '>6i', self.block_id, self.revision, self.block_size, self.key_format, self.key1, self.key2
        )


def read_container_header(reader: BinaryReader) -> ContainerHeader:
    signature = reader.read_tag('file signature')
    if signature != RBBF_SIGNATURE:
        raise MalformedHeaderError(f"Not an RBBF file (signature is {signature!r}, expected {RBBF_SIGNATURE!r})")

    format_version, reserved1, reserved2, first_block_offset = reader.read_struct('4i', 'container header')

    if format_version not in SUPPORTED_FORMAT_VERSIONS:
        raise MalformedHeaderError(f"Unsupported RBBF format version {format_version}")

    if format_version == 1:
        return ContainerHeader(signature, format_version, reserved1, reserved2, first_block_offset)

    min_ide_version = reader.read_int32('minimum IDE version')

    return ContainerHeader(signature, format_version, reserved1, reserved2, first_block_offset, min_ide_version)


def read_block_header(reader: BinaryReader) -> BlockHeader:
    """Reads the block header fields that follow the 'Blok' sentinel."""
    type_tag = reader.read_tag('block type')
    block_id, revision, block_size, key_format, key1, key2 = reader.read_struct('6i', 'block header')

    if block_size < BLOCK_HEADER_SIZE:
        raise MalformedBlockHeaderError(
            f"Block {type_tag!r} (ID {block_id}) declares a size of {block_size} bytes, which is smaller than its "
            f"own {BLOCK_HEADER_SIZE}-byte header"
        )

    return BlockHeader(type_tag, block_id, revision, block_size, key_format, key1, key2)

