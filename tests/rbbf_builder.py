"""
Helpers for assembling small big-endian RBBF files in tests.
"""

import struct


def i32(value: int) -> bytes:
    return struct.pack('>i', value)


def tag(text: str) -> bytes:
    assert len(text) == 4
    return text.encode('latin-1')


def raw_string(data: bytes) -> bytes:
    padding = (-len(data)) % 4
    return i32(len(data)) + data + b'\0' * padding


def string_item(field: str, text, *, type_tag: str = 'Strn') -> bytes:
    data = text if isinstance(text, bytes) else text.encode('latin-1')
    return tag(field) + tag(type_tag) + raw_string(data)


def int_item(field: str, value: int) -> bytes:
    return tag(field) + tag('Int ') + i32(value)


def double_item(field: str, value: float) -> bytes:
    return tag(field) + tag('Dbl ') + struct.pack('>d', value)


def rect_item(field: str, left: int, top: int, width: int, height: int) -> bytes:
    return tag(field) + tag('Rect') + struct.pack('>4i', left, top, width, height)


def padding_item(field: str, size: int) -> bytes:
    return tag(field) + tag('Padn') + i32(size) + b'\0' * size


def group(group_tag: str, group_id: int, *entries: bytes, trailer_type: str = 'Int ', trailer_id: int = None) -> bytes:
    content = b''.join(entries)
    trailer_id = group_id if trailer_id is None else trailer_id

    return (
        tag(group_tag) + tag('Grup') + i32(len(content)) + i32(group_id) + content +
        tag('EndG') + tag(trailer_type) + i32(trailer_id)
    )


def block(
    type_tag: str, block_id: int, *entries: bytes, revision: int = 1, key_format: int = 0, key1: int = 0,
    key2: int = 0, size_adjust: int = 0,
) -> bytes:
    body = b''.join(entries)
    size = 32 + len(body) + size_adjust

    return tag('Blok') + tag(type_tag) + struct.pack('>6i', block_id, revision, size, key_format, key1, key2) + body


def container_header(format_version: int = 2, min_ide_version: int = 201901, extra_gap: int = 0) -> bytes:
    header_size = 20 if format_version == 1 else 24
    fields = [format_version, 0, 0, header_size + extra_gap]
    if format_version != 1:
        fields.append(min_ide_version)

    return tag('RbBF') + struct.pack(f'>{len(fields)}i', *fields) + b'\0' * extra_gap


def rbbf_file(*blocks: bytes, format_version: int = 2, min_ide_version: int = 201901, eof: bool = True) -> bytes:
    return (
        container_header(format_version, min_ide_version) + b''.join(blocks) + (tag('EOF!') if eof else b'')
    )
