"""
Top-level block framing of an RBBF file.

After the container header, the file is a sequence of blocks, each introduced by the ``'Blok'`` sentinel, and ends
with the ``'EOF!'`` sentinel. Every block is turned into one ``<block type="..." ID="...">`` element:

- opaque blocks (nonzero key format) are dumped verbatim as a single ``<Hex>`` element covering the sentinel, the
  re-serialized header and the body
- all other blocks have their body decoded structurally by a `BodyDecoder`, over a reader isolated to the body bytes

Errors inside a block body are confined to that block unless `ConvertOptions.fail_fast` is set. Errors in the framing
itself are fatal.
"""

import logging

from dataclasses import dataclass, field
from typing import List

from .BinaryReader import BinaryReader, BinaryReaderEOFError
from .emitter import DeferredVersionEmitter
from .errors import BlockDecodeError, UnexpectedEOFError, UnexpectedTopLevelTagError
from .groups import BodyDecoder, DecodeStats
from .header import BlockHeader, BLOCK_SENTINEL, END_OF_FILE_SENTINEL, read_block_header
from .options import ConvertOptions
from .tags import TagTables
from .values import make_hex_bytes_value, make_xml_attribute_safe
from .version import translate_saved_in_version


LOG = logging.getLogger(__name__)

PROJECT_BLOCK_NAME = 'Project'


@dataclass
class BlockStats:
    n_decoded: int = 0
    n_failed: int = 0
    n_opaque: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    reached_eof_marker: bool = False


class BlockDecoder:
    _reader: BinaryReader
    _tables: TagTables
    _emitter: DeferredVersionEmitter
    _options: ConvertOptions
    _decode_stats: DecodeStats
    _block_stats: BlockStats

    def __init__(
        self, reader: BinaryReader, tables: TagTables, emitter: DeferredVersionEmitter, options: ConvertOptions,
        decode_stats: DecodeStats, block_stats: BlockStats,
    ):
        self._reader = reader
        self._tables = tables
        self._emitter = emitter
        self._options = options
        self._decode_stats = decode_stats
        self._block_stats = block_stats

    def decode_all(self):
        """
        Decodes blocks from the current position until the end-of-file marker.

        Raises:
            FatalConversionError: (or a subclass) if the block framing is broken.
            BlockDecodeError: only if `fail_fast` is set.
        """
        while True:
            if self._reader.eof():
                message = "Input ended without an end-of-file marker"
                LOG.warning(message)
                self._block_stats.warnings.append(message)
                return

            position = self._reader.tell()
            tag = self._read_outer(lambda: self._reader.read_tag('block sentinel'))

            if tag == END_OF_FILE_SENTINEL:
                self._block_stats.reached_eof_marker = True
                return
            if tag != BLOCK_SENTINEL:
                raise UnexpectedTopLevelTagError(tag, position)

            self._decode_block()

    def _decode_block(self):
        header = self._read_outer(lambda: read_block_header(self._reader))
        type_name = self._tables.block_name(header.type_tag)

        if type_name == PROJECT_BLOCK_NAME:
            header = header.with_cleared_keys()

        body = self._read_outer(lambda: self._reader.read_amount(header.body_size, f"body of block {type_name!r}"))

        LOG.debug(f"Block {type_name!r} ID={header.block_id} rev={header.revision} size={header.block_size}")

        self._emitter.write_line(f'<block type="{make_xml_attribute_safe(type_name)}" ID="{header.block_id}">')
        try:
            if header.is_opaque:
                self._emit_opaque_body(header, body)
            else:
                self._decode_plain_body(type_name, header, body)
        finally:
            self._emitter.write_line('</block>')

            if type_name == PROJECT_BLOCK_NAME:
                self._emitter.resolve_fallback_version()

    def _emit_opaque_body(self, header: BlockHeader, body: bytes):
        raw = BLOCK_SENTINEL.encode('latin-1') + header.to_bytes() + body

        self._emitter.write_line(make_hex_bytes_value(raw))
        self._block_stats.n_opaque += 1

    def _decode_plain_body(self, type_name: str, header: BlockHeader, body: bytes):
        decoder = BodyDecoder(
            BinaryReader(body, big_endian=self._reader.big_endian),
            self._tables,
            self._emitter,
            self._options,
            self._decode_stats,
            self._on_saved_in_version if type_name == PROJECT_BLOCK_NAME else None,
        )

        try:
            decoder.decode()
        except BlockDecodeError as e:
            self._block_stats.n_failed += 1
            message = f"Block {type_name!r} (ID {header.block_id}) could not be fully decoded: {e}"
            self._block_stats.errors.append(message)

            if self._options.fail_fast:
                raise

            LOG.error(message)
            return

        self._block_stats.n_decoded += 1

    def _on_saved_in_version(self, token: str):
        version = translate_saved_in_version(token, self._options.fallback_version)

        LOG.debug(f"Found saved-in-version token {token!r}, translated to {version!r}")

        self._emitter.resolve_version(version)

    def _read_outer(self, read_fn):
        try:
            return read_fn()
        except BinaryReaderEOFError as e:
            raise UnexpectedEOFError(str(e)) from e
