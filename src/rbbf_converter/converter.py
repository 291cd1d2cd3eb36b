"""
Conversion driver: ties the container header, the block decoder and the output sink together.

The two entry points are:

- `convert()`: converts an already open binary stream (or a bytes object) to any `OutputDestination`
- `convert_file()`: the same, starting from a file path, with the output going to the console or to a file
"""

import logging

from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Union, BinaryIO, Optional, List, Mapping

from .BinaryReader import BinaryReader, BinaryReaderEOFError
from .blocks import BlockDecoder, BlockStats
from .emitter import DeferredVersionEmitter, VERSION_PLACEHOLDER
from .errors import UnexpectedEOFError
from .groups import DecodeStats
from .header import ContainerHeader, read_container_header
from .options import ConvertOptions
from .output import OutputDestination, resolve_output_sink
from .tags import build_tag_tables


LOG = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
ROOT_ELEMENT = 'RBProject'


@dataclass(frozen=True)
class ConversionResult:
    header: ContainerHeader
    version: str
    """The project version that ended up in the root element (discovered or fallback)."""
    n_blocks_decoded: int = 0
    n_blocks_failed: int = 0
    n_blocks_opaque: int = 0
    omitted_field_tags: Mapping[str, int] = field(default_factory=dict)
    """Unknown field tags that were skipped, with the number of times each was seen."""
    trailer_mismatches: List[str] = field(default_factory=list)
    block_errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def n_blocks(self) -> int:
        return self.n_blocks_decoded + self.n_blocks_failed + self.n_blocks_opaque

    @property
    def clean(self) -> bool:
        """True if nothing at all went wrong or was skipped during the conversion."""
        return not (self.n_blocks_failed or self.omitted_field_tags or self.trailer_mismatches or self.warnings)


def convert(
    source: Union[bytes, BinaryIO], sink: OutputDestination, options: Optional[ConvertOptions] = None
) -> ConversionResult:
    """
    Converts an RBBF project to XML.

    Args:
        source: The binary project data, as bytes or as a binary file object positioned at the start of the data.
        sink: Where the XML lines should go. See `resolve_output_sink` for the accepted values. The sink is not
            closed by this function if it was passed in as an `OutputSink`.
        options: Conversion options. Defaults are used if absent.

    Returns:
        A `ConversionResult` summarizing what was decoded and what was skipped.

    Raises:
        FatalConversionError: (or a subclass) if the data cannot be converted at all. Note that some output may have
            been produced by then.
        BlockDecodeError: only if `options.fail_fast` is set.
    """
    options = options or ConvertOptions()
    output_sink = resolve_output_sink(sink)

    reader = BinaryReader(source, big_endian=True)

    try:
        header = read_container_header(reader)
    except BinaryReaderEOFError as e:
        raise UnexpectedEOFError(f"Input too short for an RBBF header: {e}") from e

    tables = build_tag_tables(header.format_version)

    LOG.debug(
        f"RBBF format {header.format_version}, min IDE version {header.min_ide_version}, first block at "
        f"{header.first_block_offset}"
    )

    emitter = DeferredVersionEmitter(output_sink, options.fallback_version)
    decode_stats = DecodeStats()
    block_stats = BlockStats()

    emitter.write_line(XML_DECLARATION)
    emitter.write_line(
        f'<{ROOT_ELEMENT} version={VERSION_PLACEHOLDER} FormatVersion="{header.format_version}" '
        f'MinIDEVersion="{header.min_ide_version}">'
    )

    reader.seek(header.first_block_offset)

    try:
        BlockDecoder(reader, tables, emitter, options, decode_stats, block_stats).decode_all()
    finally:
        emitter.write_line(f'</{ROOT_ELEMENT}>')
        emitter.finish()

    if decode_stats.omitted_field_tags:
        LOG.info(f"Omitted unknown field tags: {summarize_omitted_tags(decode_stats.omitted_field_tags)}")

    return ConversionResult(
        header=header,
        version=emitter.version,
        n_blocks_decoded=block_stats.n_decoded,
        n_blocks_failed=block_stats.n_failed,
        n_blocks_opaque=block_stats.n_opaque,
        omitted_field_tags=dict(decode_stats.omitted_field_tags),
        trailer_mismatches=list(decode_stats.trailer_mismatches),
        block_errors=list(block_stats.errors),
        warnings=list(block_stats.warnings),
    )


def convert_file(
    input_path: Union[str, PathLike], output_path: Union[None, str, PathLike] = None,
    options: Optional[ConvertOptions] = None
) -> ConversionResult:
    """
    Converts an RBBF project file to XML.

    If `output_path` is None or blank, the XML goes to standard output. Otherwise the file at `output_path` is
    created, replacing any existing file.
    """
    if isinstance(output_path, PathLike):
        output_path = Path(output_path)

    with open(input_path, 'rb') as f:
        with resolve_output_sink(output_path) as sink:
            return convert(f, sink, options)


def summarize_omitted_tags(omitted: Mapping[str, int]) -> str:
    return ', '.join(f"{tag!r} (x{count})" for tag, count in sorted(omitted.items()))
