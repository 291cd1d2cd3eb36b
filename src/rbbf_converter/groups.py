"""
Decoder for the recursive tagged structure inside a block body.

A body is a sequence of entries, each introduced by a four-character tag. An entry is either:

- a *tagged item*: the tag is followed by a type tag and a value (see `values`), or
- a *group*: the tag is one of `SPECIAL_TAGS` and is followed by a group frame::

      'Grup' | size | ID | entries... | 'EndG' | 'Int ' | ID

Field tags and group tags share the same namespace, so for a special tag the decoder first looks ahead for the
``'Grup'`` sentinel. If it is not there, the 4 bytes are un-read and the tag is decoded as an ordinary tagged item.
"""

import logging

from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from .BinaryReader import BinaryReader, BinaryReaderEOFError
from .emitter import DeferredVersionEmitter
from .errors import BlockOverrunError, GroupTrailerMismatchError
from .options import ConvertOptions, TrailerPolicy
from .tags import TagTables, SpecialTag, GroupKind, SPECIAL_TAGS
from .values import TypedValue, IntValue, PaddingValue, TYPE_INT, read_typed_value, make_xml_attribute_safe
from .version import SAVED_IN_VERSION_TAG


LOG = logging.getLogger(__name__)

GROUP_SENTINEL = 'Grup'
GROUP_END_SENTINEL = 'EndG'


@dataclass
class DecodeStats:
    """Observations accumulated over a whole conversion."""
    omitted_field_tags: Counter = field(default_factory=Counter)
    trailer_mismatches: List[str] = field(default_factory=list)


@dataclass
class PropertyValue:
    name: str = ''
    type: Optional[str] = None
    group: Optional[str] = None
    visible: Optional[bool] = None
    encoding: Optional[int] = None
    value: Optional[TypedValue] = None


class BodyDecoder:
    """
    Decodes one block body, writing XML lines to the emitter as it goes.

    If `on_saved_in_version` is given, it is called with the raw text of the first saved-in-version field among
    the body's top-level items.
    """

    _reader: BinaryReader
    _tables: TagTables
    _emitter: DeferredVersionEmitter
    _options: ConvertOptions
    _stats: DecodeStats
    _on_saved_in_version: Optional[Callable[[str], None]]

    def __init__(
        self, reader: BinaryReader, tables: TagTables, emitter: DeferredVersionEmitter, options: ConvertOptions,
        stats: DecodeStats, on_saved_in_version: Optional[Callable[[str], None]] = None,
    ):
        self._reader = reader
        self._tables = tables
        self._emitter = emitter
        self._options = options
        self._stats = stats
        self._on_saved_in_version = on_saved_in_version

    def decode(self):
        """
        Decodes entries until the body is exhausted.

        Raises:
            BlockDecodeError: (or a subclass) if the body is malformed. Any elements opened so far are closed before
                the exception propagates, so the output remains well-formed.
        """
        try:
            while not self._reader.eof():
                self._decode_entry(self._reader.read_tag('entry tag'), emit_items=True, top_level=True)
        except BinaryReaderEOFError as e:
            raise BlockOverrunError(f"Body is shorter than its content requires ({e})", e.position) from e

    def _decode_entry(self, tag: str, emit_items: bool, top_level: bool = False):
        special = SPECIAL_TAGS.get(tag)

        if (special is not None) and self._try_decode_group(special):
            return

        self._decode_item(tag, emit_items, top_level)

    def _try_decode_group(self, special: SpecialTag) -> bool:
        if not self._reader.try_tag(GROUP_SENTINEL, 'group sentinel'):
            return False

        _size, group_id = self._reader.read_struct('2i', 'group frame')

        if special.kind == GroupKind.PROPERTY_VALUE:
            self._decode_property_value(group_id)
        elif special.kind == GroupKind.NAMED:
            with self._element(special.name):
                self._decode_group_entries(emit_items=True)
                self._check_trailer(special.name, group_id)
        elif special.kind in (GroupKind.WRAPPER, GroupKind.SKIPPED):
            # Only the group's own items are dropped, nested groups are still written
            self._decode_group_entries(emit_items=False)
            self._check_trailer(special.name, group_id)
        else:
            raise AssertionError(f"Unhandled group kind {special.kind}")

        return True

    def _decode_group_entries(self, emit_items: bool):
        while True:
            tag = self._reader.read_tag('entry tag')
            if tag == GROUP_END_SENTINEL:
                return

            self._decode_entry(tag, emit_items)

    def _check_trailer(self, group_name: str, group_id: int):
        position = self._reader.tell()
        end_type = self._reader.read_tag('group trailer type')
        end_id = self._reader.read_int32('group trailer ID')

        if (end_type == TYPE_INT) and (end_id == group_id):
            return

        policy = self._options.trailer_policy
        if policy == TrailerPolicy.IGNORE:
            return

        error = GroupTrailerMismatchError(group_name, group_id, end_type, end_id, position)
        if policy == TrailerPolicy.FAIL:
            raise error

        LOG.warning(str(error))
        self._stats.trailer_mismatches.append(str(error))

    def _decode_item(self, tag: str, emit_items: bool, top_level: bool):
        type_tag = self._reader.read_tag('type tag')
        value = read_typed_value(self._reader, type_tag)

        if emit_items and not isinstance(value, PaddingValue):
            name = self._tables.field_name(tag)

            if name is None:
                self._stats.omitted_field_tags[tag] += 1
                LOG.debug(f"Omitting unknown field tag {tag!r}")
            elif name != '':
                self._emitter.write_line(f"<{name}>{value.render()}</{name}>")

        if top_level and (tag == SAVED_IN_VERSION_TAG) and (self._on_saved_in_version is not None):
            callback = self._on_saved_in_version
            self._on_saved_in_version = None
            callback(value.as_text())

    def _decode_property_value(self, group_id: int):
        prop = PropertyValue()

        while True:
            tag = self._reader.read_tag('property field tag')
            if tag == GROUP_END_SENTINEL:
                break

            type_tag = self._reader.read_tag('property field type')
            value = read_typed_value(self._reader, type_tag)

            if tag == 'name':
                prop.name = value.as_text()
            elif tag == 'type':
                prop.type = value.as_text()
            elif tag == 'PrGp':
                prop.group = value.as_text()
            elif tag == 'visi':
                prop.visible = value.as_text() != '0'
            elif tag == 'Enco':
                prop.encoding = value.value if isinstance(value, IntValue) else None
            elif tag == 'PVal':
                prop.value = value

        self._check_trailer('PropertyVal', group_id)

        rendered = prop.value.render() if prop.value is not None else ''
        self._emitter.write_line(f'<PropertyVal Name="{make_xml_attribute_safe(prop.name)}">{rendered}</PropertyVal>')

    @contextmanager
    def _element(self, name: str) -> Iterator[None]:
        self._emitter.write_line(f"<{name}>")

        try:
            yield
        finally:
            self._emitter.write_line(f"</{name}>")
