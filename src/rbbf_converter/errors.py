"""
Exceptions raised while converting an RBBF project.

There are two families:

- `FatalConversionError`: the conversion as a whole cannot continue (corrupt container header, unknown block type,
  input exhausted mid-read, etc.)
- `BlockDecodeError`: something is wrong inside the body of a single block. Normally only that block is affected; the
  converter closes whatever elements it had opened for it, records the problem and moves on to the next block.
"""

from typing import Optional


class RBBFConverterError(Exception):
    """Base class for all errors signalled by the converter."""


class FatalConversionError(RBBFConverterError):
    pass


class MalformedHeaderError(FatalConversionError):
    pass


class UnexpectedTopLevelTagError(FatalConversionError):
    tag: str
    position: int

    def __init__(self, tag: str, position: int):
        self.tag = tag
        self.position = position

        super().__init__(f"At position {position}, expected a block or end-of-file marker, but found tag {tag!r}")


class UnknownBlockTagError(FatalConversionError):
    tag: str
    format_version: int

    def __init__(self, tag: str, format_version: int):
        self.tag = tag
        self.format_version = format_version

        super().__init__(f"Unknown block type {tag!r} for format version {format_version}")


class MalformedBlockHeaderError(FatalConversionError):
    pass


class UnexpectedEOFError(FatalConversionError):
    """Raised when the input ends in the middle of the container structure (header, block header or block body)."""


class BlockDecodeError(RBBFConverterError):
    """
    Base class for errors that are scoped to the body of a single block.

    The `position` is relative to the start of the block body.
    """
    position: Optional[int]

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position

        super().__init__(message if position is None else f"At body offset {position}: {message}")


class UnknownTypeTagError(BlockDecodeError):
    tag: str

    def __init__(self, tag: str, position: Optional[int] = None):
        self.tag = tag

        super().__init__(f"Unknown value type tag {tag!r}", position)


class MalformedValueError(BlockDecodeError):
    pass


class GroupTrailerMismatchError(BlockDecodeError):
    group_name: str
    expected_id: int
    found_type: str
    found_id: int

    def __init__(self, group_name: str, expected_id: int, found_type: str, found_id: int, position: Optional[int]):
        self.group_name = group_name
        self.expected_id = expected_id
        self.found_type = found_type
        self.found_id = found_id

        super().__init__(
            f"Group {group_name or '(wrapper)'!r} opened with ID {expected_id} but closed with "
            f"({found_type!r}, {found_id})",
            position
        )


class BlockOverrunError(BlockDecodeError):
    """Raised when decoding a block body would need more bytes than the declared block size provides."""
