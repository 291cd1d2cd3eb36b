import unittest

from rbbf_converter.BinaryReader import BinaryReader
from rbbf_converter.emitter import DeferredVersionEmitter
from rbbf_converter.errors import GroupTrailerMismatchError, BlockOverrunError, UnknownTypeTagError
from rbbf_converter.groups import BodyDecoder, DecodeStats
from rbbf_converter.options import ConvertOptions, TrailerPolicy
from rbbf_converter.output import MemoryOutputSink
from rbbf_converter.tags import build_tag_tables

from rbbf_builder import (
    string_item, int_item, double_item, rect_item, padding_item, group, tag, i32,
)


def decode_body(body: bytes, options: ConvertOptions = ConvertOptions(), on_saved_in_version=None, sink=None):
    sink = sink or MemoryOutputSink()
    emitter = DeferredVersionEmitter(sink)
    emitter.resolve_version('test')
    stats = DecodeStats()

    BodyDecoder(BinaryReader(body), build_tag_tables(2), emitter, options, stats, on_saved_in_version).decode()

    return sink.lines, stats


class ItemsTest(unittest.TestCase):
    def test_plain_items(self):
        lines, _ = decode_body(
            string_item('Name', 'Window1') + int_item('Cont', 0) + double_item('srcl', 2.5) +
            rect_item('Icon', 1, 2, 3, 4)
        )

        self.assertEqual(lines, [
            '<ObjName>Window1</ObjName>',
            '<ObjContainerID>0</ObjContainerID>',
            '<SourceLine>2.50</SourceLine>',
            '<Icon><Rect left="1" top="2" width="3" height="4"/></Icon>',
        ])

    def test_suppressed_tag_not_emitted(self):
        lines, stats = decode_body(int_item('Arch', 1) + int_item('Cont', 5))

        self.assertEqual(lines, ['<ObjContainerID>5</ObjContainerID>'])
        self.assertEqual(len(stats.omitted_field_tags), 0)

    def test_unknown_tag_counted(self):
        lines, stats = decode_body(int_item('zzzz', 1) + string_item('zzzz', 'x') + int_item('Cont', 5))

        self.assertEqual(lines, ['<ObjContainerID>5</ObjContainerID>'])
        self.assertEqual(stats.omitted_field_tags['zzzz'], 2)

    def test_padding_not_emitted(self):
        lines, _ = decode_body(padding_item('Name', 5) + int_item('Cont', 5))

        self.assertEqual(lines, ['<ObjContainerID>5</ObjContainerID>'])

    def test_unknown_type_tag(self):
        with self.assertRaises(UnknownTypeTagError):
            decode_body(tag('Cont') + tag('Blob') + i32(1))

    def test_truncated_body(self):
        with self.assertRaises(BlockOverrunError):
            decode_body(string_item('Name', 'Window1')[:-4])


class GroupsTest(unittest.TestCase):
    def test_named_group(self):
        lines, _ = decode_body(group('Meth', 7, string_item('name', 'Run'), int_item('Cont', 1)))

        self.assertEqual(lines, ['<Method>', '<ItemName>Run</ItemName>', '<ObjContainerID>1</ObjContainerID>', '</Method>'])

    def test_nested_groups(self):
        lines, _ = decode_body(group('Meth', 1, group('sorc', 2, string_item('srcl', 'Return'))))

        self.assertEqual(
            lines, ['<Method>', '<ItemSource>', '<SourceLine>Return</SourceLine>', '</ItemSource>', '</Method>']
        )

    def test_special_tag_without_group_frame_is_a_field(self):
        lines, _ = decode_body(string_item('Icon', 'abc'))

        self.assertEqual(lines, ['<Icon>abc</Icon>'])

    def test_wrapper_group_drops_its_own_items(self):
        lines, _ = decode_body(group('FDef', 3, string_item('name', 'x'), string_item('name', 'y')) + int_item('Cont', 1))

        self.assertEqual(lines, ['<ObjContainerID>1</ObjContainerID>'])

    def test_wrapper_group_keeps_nested_groups(self):
        lines, _ = decode_body(group('FDef', 3, string_item('name', 'f'), group('Meth', 4, string_item('name', 'x'))))

        self.assertEqual(lines, ['<Method>', '<ItemName>x</ItemName>', '</Method>'])

    def test_skipped_group_keeps_nested_groups(self):
        lines, _ = decode_body(
            group('CPal', 3, int_item('Cont', 9), group('Meth', 4, string_item('name', 'x'))) + int_item('Cont', 1)
        )

        self.assertEqual(
            lines, ['<Method>', '<ItemName>x</ItemName>', '</Method>', '<ObjContainerID>1</ObjContainerID>']
        )

    def test_skipped_group_does_not_count_unknown_tags(self):
        _, stats = decode_body(group('CPal', 3, int_item('zzzz', 1)))

        self.assertEqual(len(stats.omitted_field_tags), 0)

    def test_property_value_inside_skipped_group(self):
        lines, _ = decode_body(group('CPal', 3, group('PDef', 4, string_item('name', 'X'), int_item('PVal', 1))))

        self.assertEqual(lines, ['<PropertyVal Name="X">1</PropertyVal>'])

    def test_property_value(self):
        lines, _ = decode_body(group(
            'PDef', 3,
            string_item('name', 'Width'), string_item('type', 'Integer'), string_item('PrGp', 'Size'),
            int_item('visi', 1), int_item('Enco', 0x08000100), int_item('PVal', 100),
        ))

        self.assertEqual(lines, ['<PropertyVal Name="Width">100</PropertyVal>'])

    def test_property_value_escaping(self):
        lines, _ = decode_body(group('PDef', 3, string_item('name', 'A"B'), string_item('PVal', 'x<y')))

        self.assertEqual(lines, ['<PropertyVal Name="A&quot;B">x&lt;y</PropertyVal>'])

    def test_property_value_with_control_chars_is_hex(self):
        lines, _ = decode_body(group('PDef', 3, string_item('name', 'X'), string_item('PVal', 'a\tb')))

        self.assertEqual(lines, ['<PropertyVal Name="X"><Hex bytes="3">610962</Hex></PropertyVal>'])


class TrailerPolicyTest(unittest.TestCase):
    BODY = group('Meth', 7, string_item('name', 'Run'), trailer_id=8)

    def test_warn_records(self):
        lines, stats = decode_body(self.BODY, ConvertOptions(trailer_policy=TrailerPolicy.WARN))

        self.assertEqual(lines[-1], '</Method>')
        self.assertEqual(len(stats.trailer_mismatches), 1)
        self.assertIn('Method', stats.trailer_mismatches[0])

    def test_ignore_is_silent(self):
        lines, stats = decode_body(self.BODY, ConvertOptions(trailer_policy=TrailerPolicy.IGNORE))

        self.assertEqual(len(lines), 3)
        self.assertEqual(stats.trailer_mismatches, [])

    def test_fail_raises_and_closes_elements(self):
        sink = MemoryOutputSink()

        with self.assertRaises(GroupTrailerMismatchError) as ctx:
            decode_body(
                group('Meth', 1, self.BODY), ConvertOptions(trailer_policy=TrailerPolicy.FAIL), sink=sink
            )

        self.assertEqual(ctx.exception.expected_id, 7)
        self.assertEqual(ctx.exception.found_id, 8)
        self.assertEqual(sink.lines[-2:], ['</Method>', '</Method>'])

    def test_wrong_trailer_type(self):
        _, stats = decode_body(group('Meth', 7, trailer_type='Strn'))

        self.assertEqual(len(stats.trailer_mismatches), 1)

    def test_matching_trailer_is_clean(self):
        _, stats = decode_body(group('Meth', 7, string_item('name', 'Run')))

        self.assertEqual(stats.trailer_mismatches, [])


class SavedInVersionTest(unittest.TestCase):
    def test_callback_fires_once_after_line(self):
        sink = MemoryOutputSink()
        seen = []

        def on_version(token):
            seen.append((token, list(sink.lines)))

        decode_body(
            string_item('PSIV', '2019.011') + string_item('PSIV', '2020.01'), on_saved_in_version=on_version, sink=sink,
        )

        self.assertEqual(seen, [('2019.011', ['<ProjectSavedInVers>2019.011</ProjectSavedInVers>'])])

    def test_nested_field_is_ignored(self):
        seen = []

        decode_body(
            group('Meth', 1, string_item('PSIV', '2019.011')) + string_item('PSIV', '2020.01'),
            on_saved_in_version=seen.append,
        )

        self.assertEqual(seen, ['2020.01'])

    def test_field_inside_skipped_group_is_ignored(self):
        seen = []

        lines, _ = decode_body(group('CPal', 1, string_item('PSIV', '2019.011')), on_saved_in_version=seen.append)

        self.assertEqual(seen, [])
        self.assertEqual(lines, [])
