"""
Typed values stored in RBBF tagged items, and their rendering as XML text.

Every tagged item carries a four-character type tag that says how the following bytes are encoded:

- ``'Strn'``: 32-bit length, followed by that many single-byte characters, padded to a multiple of 4 bytes
- ``'Int '``: signed 32-bit int
- ``'Dbl '``: 64-bit IEEE double
- ``'Rect'``: four signed 32-bit ints (left, top, width, height)
- ``'Padn'``: 32-bit length, followed by that many bytes of filler

Rendering rules:

- Text containing any control character is dumped as ``<Hex bytes="N">...</Hex>``
- Other text is XML-escaped, except for values that already start with an escaped ``&h``/``&c`` literal
- Rectangles are rendered as an inline ``<Rect .../>`` element and are never escaped or hex-dumped
"""

import unicodedata

from dataclasses import dataclass
from typing import Callable, Dict

from .BinaryReader import BinaryReader
from .errors import UnknownTypeTagError, MalformedValueError


TYPE_STRING = 'Strn'
TYPE_INT = 'Int '
TYPE_DOUBLE = 'Dbl '
TYPE_RECT = 'Rect'
TYPE_PADDING = 'Padn'

_ALREADY_ESCAPED_PREFIXES = ('&amp;h', '&amp;H', '&amp;c', '&amp;C')


@dataclass(frozen=True)
class TypedValue:
    def as_text(self) -> str:
        """The plain text form of the value, before any XML treatment."""
        raise NotImplementedError

    def render(self) -> str:
        """The value as it should appear inside its XML element."""
        return render_text(self.as_text())


@dataclass(frozen=True)
class StringValue(TypedValue):
    raw: bytes

    def as_text(self) -> str:
        return ascii_text(self.raw)

    def render(self) -> str:
        text = self.as_text()

        return make_hex_bytes_value(self.raw) if contains_control_chars(text) else make_xml_safe(text)


@dataclass(frozen=True)
class IntValue(TypedValue):
    value: int

    def as_text(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DoubleValue(TypedValue):
    value: float

    def as_text(self) -> str:
        return f"{self.value:.2f}"


@dataclass(frozen=True)
class RectValue(TypedValue):
    left: int
    top: int
    width: int
    height: int

    def as_text(self) -> str:
        return f'<Rect left="{self.left}" top="{self.top}" width="{self.width}" height="{self.height}"/>'

    def render(self) -> str:
        return self.as_text()


@dataclass(frozen=True)
class PaddingValue(TypedValue):
    size: int

    def as_text(self) -> str:
        return ''


def read_typed_value(reader: BinaryReader, type_tag: str) -> TypedValue:
    """
    Decodes the value that follows a type tag.

    Raises:
        UnknownTypeTagError: If the type tag is not one of the known ones. The stream cannot be resynchronized after
            this, since the size of the value is unknown.
        MalformedValueError: If a length prefix is negative.
    """
    reader_fn = _READERS_BY_TYPE.get(type_tag)
    if reader_fn is None:
        raise UnknownTypeTagError(type_tag, reader.tell() - 4)

    return reader_fn(reader)


def _read_string(reader: BinaryReader) -> StringValue:
    length = reader.read_int32('string length')
    if length < 0:
        raise MalformedValueError(f"Negative string length {length}", reader.tell() - 4)

    data = reader.read_amount(padded_length(length), 'string data')

    return StringValue(data[:length])


def _read_int(reader: BinaryReader) -> IntValue:
    return IntValue(reader.read_int32('int value'))


def _read_double(reader: BinaryReader) -> DoubleValue:
    return DoubleValue(reader.read_double('double value'))


def _read_rect(reader: BinaryReader) -> RectValue:
    return RectValue(*reader.read_struct('4i', 'rect value'))


def _read_padding(reader: BinaryReader) -> PaddingValue:
    size = reader.read_int32('padding length')
    if size < 0:
        raise MalformedValueError(f"Negative padding length {size}", reader.tell() - 4)

    reader.skip_bytes(size, 'padding')

    return PaddingValue(size)


_READERS_BY_TYPE: Dict[str, Callable[[BinaryReader], TypedValue]] = {
    TYPE_STRING: _read_string,
    TYPE_INT: _read_int,
    TYPE_DOUBLE: _read_double,
    TYPE_RECT: _read_rect,
    TYPE_PADDING: _read_padding,
}


def padded_length(length: int) -> int:
    """Rounds a length up to the next multiple of 4."""
    return (length + 3) & ~3


def ascii_text(data: bytes) -> str:
    """Interprets bytes as ASCII text. Bytes outside the ASCII range come out as ``'?'``."""
    return data.decode('ascii', errors='replace').replace('\ufffd', '?')


def contains_control_chars(text: str) -> bool:
    return any(unicodedata.category(char) == 'Cc' for char in text)


def make_hex_bytes_value(data: bytes) -> str:
    return f'<Hex bytes="{len(data)}">{data.hex().upper()}</Hex>'


def make_xml_safe(text: str) -> str:
    if text.startswith(_ALREADY_ESCAPED_PREFIXES):
        return text

    return text.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;').replace("'", '&apos;')


def make_xml_attribute_safe(text: str) -> str:
    """Escapes text for use inside a double-quoted attribute. Control characters, which cannot be hex-dumped there,
    become ``'?'``."""
    text = ''.join('?' if unicodedata.category(char) == 'Cc' else char for char in text)

    return make_xml_safe(text).replace('"', '&quot;')


def render_text(text: str) -> str:
    """Renders arbitrary text: hex dump if it contains control characters, escaped text otherwise."""
    if contains_control_chars(text):
        return make_hex_bytes_value(text.encode('ascii', errors='replace'))

    return make_xml_safe(text)
