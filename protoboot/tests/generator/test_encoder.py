"""Tests for descriptor byte encoding"""

import base64
import os

from google.protobuf import descriptor_pb2

from protoboot.generator import load
from protoboot.generator.encoder import encode, encode_chunks, to_raw
from protoboot.proto.types import DESCRIPTOR_PROTO, FieldType, Label
from protoboot.proto.wire import custom_option_numbers, decode_file, read_custom_values

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def _shapes():
    with open(FILE_DIR + "/shapes.json", encoding="utf-8") as f:
        return load(f.read())


def describe_to_raw():
    def test_converts_types_and_labels(expect):
        shapes = _shapes().find("shapes.proto")
        raw = to_raw(shapes)
        shape = raw.message_type[0]

        expect(list(raw.dependency)) == ["geo.proto", "options.proto"]
        expect(shape.field[2].label) == Label.REPEATED
        expect(shape.field[2].type) == FieldType.MESSAGE
        expect(shape.field[2].type_name) == ".shapes.Shape"
        expect(shape.nested_type[0].name) == "Style"
        expect(shape.extension[0].extendee) == ".geo.Point"
        expect(raw.extension[0].number) == 101

    def test_extension_ranges(expect):
        raw = to_raw(_shapes().find("geo.proto"))
        extension_range = raw.message_type[0].extension_range[0]

        expect((extension_range.start, extension_range.end)) == (100, 200)

    def test_options_extensions_depend_on_descriptor_proto(expect):
        raw = to_raw(_shapes().find("options.proto"))

        expect(list(raw.dependency)) == [DESCRIPTOR_PROTO]
        expect(raw.extension[0].extendee) == ".google.protobuf.MessageOptions"

    def test_custom_options_are_unknown_fields(expect):
        raw = to_raw(_shapes().find("shapes.proto"))
        shape = raw.message_type[0]

        expect(custom_option_numbers(shape.options)) == [1000]
        label = read_custom_values(shape.options, [(1000, FieldType.STRING, Label.OPTIONAL)])
        expect(label) == {1000: "shape"}

        options = shape.field[0].options
        precision = read_custom_values(options, [(1001, FieldType.INT32, Label.OPTIONAL)])
        expect(precision) == {1001: 3}

    def test_lite_runtime(expect):
        unit = load({"files": [{"name": "a.proto", "options": {"lite_runtime": True}}]}).files[0]
        raw = to_raw(unit)

        expect(raw.options.optimize_for) == descriptor_pb2.FileOptions.LITE_RUNTIME

    def test_leaves_generator_options_out(expect):
        unit = load(
            {
                "files": [
                    {
                        "name": "a.proto",
                        "options": {"namespace": "acme", "umbrella_name": "a_mod"},
                    }
                ]
            }
        ).files[0]

        expect(to_raw(unit).HasField("options")) == False


def describe_encode():
    def test_decodes_to_the_same_records(expect):
        shapes = _shapes().find("shapes.proto")
        expect(decode_file(encode(shapes))) == to_raw(shapes)

    def test_is_deterministic(expect):
        expect(encode(_shapes().find("shapes.proto"))) == encode(_shapes().find("shapes.proto"))


def describe_encode_chunks():
    def test_chunks_are_60_characters(expect):
        shapes = _shapes().find("shapes.proto")
        chunks = encode_chunks(shapes)

        expect(len(chunks) > 1) == True
        expect({len(c) for c in chunks[:-1]}) == {60}
        expect(0 < len(chunks[-1]) <= 60) == True

    def test_concatenation_is_the_base64_text(expect):
        shapes = _shapes().find("shapes.proto")
        expect(base64.b64decode("".join(encode_chunks(shapes)))) == encode(shapes)

    def test_custom_width(expect):
        geo = _shapes().find("geo.proto")
        chunks = encode_chunks(geo, width=8)
        expect({len(c) for c in chunks[:-1]}) == {8}
        expect("".join(chunks)) == "".join(encode_chunks(geo))

    def test_short_file_is_one_chunk(expect):
        unit = load({"files": [{"name": "a.proto"}]}).files[0]
        expect(encode_chunks(unit)) == [base64.b64encode(b"\x0a\x07a.proto").decode()]
