"""Tests for descriptor bytes and custom option values"""

import base64

from google.protobuf import descriptor_pb2
from pytest import approx, raises

from protoboot.proto.errors import DecodeError
from protoboot.proto.types import FieldType, Label
from protoboot.proto.wire import (
    custom_option_numbers,
    decode_embedded,
    decode_file,
    encode_file,
    read_custom_values,
    write_custom_values,
)


def _geo():
    raw = descriptor_pb2.FileDescriptorProto(name="geo.proto", package="geo")
    point = raw.message_type.add(name="Point")
    point.field.add(name="x", number=1, type=FieldType.INT32, label=Label.OPTIONAL)
    point.field.add(name="y", number=2, type=FieldType.INT32, label=Label.OPTIONAL)
    return raw


def _options(*values):
    options = descriptor_pb2.MessageOptions()
    write_custom_values(options, values)
    return options


def describe_encode_file():
    def test_minimal_file(expect):
        data = encode_file(descriptor_pb2.FileDescriptorProto(name="a.proto"))
        expect(data) == b"\x0a\x07a.proto"

    def test_round_trip(expect):
        raw = _geo()
        expect(decode_file(encode_file(raw))) == raw

    def test_keeps_dependency_order(expect):
        raw = descriptor_pb2.FileDescriptorProto(
            name="c.proto", dependency=["b.proto", "a.proto"]
        )
        expect(list(decode_file(encode_file(raw)).dependency)) == ["b.proto", "a.proto"]


def describe_decode_file():
    def test_keeps_unknown_fields(expect):
        # Field 99, varint 5
        data = b"\x0a\x07a.proto" + b"\x98\x06\x05"
        raw = decode_file(data)

        expect(raw.name) == "a.proto"
        expect(encode_file(raw)) == data

    def test_truncated_varint(expect):
        with raises(DecodeError):
            decode_file(b"\x0a\x87")

    def test_length_past_end(expect):
        with raises(DecodeError):
            decode_file(b"\x0a\x10a.proto")

    def test_missing_name(expect):
        with raises(DecodeError) as e:
            decode_file(b"\x12\x03geo")
        expect(str(e.value)).includes("no name")

    def test_wrong_wire_type_for_name(expect):
        with raises(DecodeError):
            decode_file(b"\x08\x01")


def describe_write_custom_values():
    def test_zigzag(expect):
        options = _options((1000, FieldType.SINT32, -3))
        expect(options.SerializeToString()) == b"\xc0\x3e\x05"

    def test_keeps_builtin_options(expect):
        options = descriptor_pb2.MessageOptions(deprecated=True)
        write_custom_values(options, [(1001, FieldType.INT32, 1), (1000, FieldType.INT32, 2)])

        expect(options.deprecated) == True
        expect(custom_option_numbers(options)) == [1000, 1001]

    def test_message_type(expect):
        with raises(ValueError):
            _options((1000, FieldType.MESSAGE, b""))


def describe_read_custom_values():
    def test_signed_varint(expect):
        options = _options((1000, FieldType.INT32, -5))
        expect(read_custom_values(options, [(1000, FieldType.INT32, Label.OPTIONAL)])) == {
            1000: -5
        }

    def test_zigzag(expect):
        options = _options((1000, FieldType.SINT32, -3))
        expect(read_custom_values(options, [(1000, FieldType.SINT32, Label.OPTIONAL)])) == {
            1000: -3
        }

    def test_scalars(expect):
        options = _options(
            (1000, FieldType.BOOL, True),
            (1001, FieldType.DOUBLE, 2.5),
            (1002, FieldType.FLOAT, 0.1),
            (1003, FieldType.SFIXED32, -2),
            (1004, FieldType.STRING, "héllo"),
            (1005, FieldType.BYTES, "raw"),
            (1006, FieldType.ENUM, 2),
        )
        fields = [
            (1000, FieldType.BOOL, Label.OPTIONAL),
            (1001, FieldType.DOUBLE, Label.OPTIONAL),
            (1002, FieldType.FLOAT, Label.OPTIONAL),
            (1003, FieldType.SFIXED32, Label.OPTIONAL),
            (1004, FieldType.STRING, Label.OPTIONAL),
            (1005, FieldType.BYTES, Label.OPTIONAL),
            (1006, FieldType.ENUM, Label.OPTIONAL),
        ]

        values = read_custom_values(options, fields)

        expect(values[1000]) == True
        expect(values[1001]) == 2.5
        expect(values[1002]) == approx(0.1)
        expect(values[1003]) == -2
        expect(values[1004]) == "héllo"
        expect(values[1005]) == b"raw"
        expect(values[1006]) == 2

    def test_repeated_collects_tuple(expect):
        options = _options((1000, FieldType.INT32, 1), (1000, FieldType.INT32, 2))
        fields = [(1000, FieldType.INT32, Label.REPEATED)]
        expect(read_custom_values(options, fields)) == {1000: (1, 2)}

    def test_last_value_wins(expect):
        options = _options((1000, FieldType.INT32, 1), (1000, FieldType.INT32, 2))
        fields = [(1000, FieldType.INT32, Label.OPTIONAL)]
        expect(read_custom_values(options, fields)) == {1000: 2}

    def test_absent_option(expect):
        options = _options((1000, FieldType.INT32, 1))
        fields = [(1001, FieldType.INT32, Label.OPTIONAL)]
        expect(read_custom_values(options, fields)) == {}

    def test_mismatched_wire_type(expect):
        options = _options((1000, FieldType.INT32, 1))
        with raises(DecodeError):
            read_custom_values(options, [(1000, FieldType.STRING, Label.OPTIONAL)])


def describe_custom_option_numbers():
    def test_ignores_builtin_options(expect):
        expect(custom_option_numbers(descriptor_pb2.MessageOptions(deprecated=True))) == []


def describe_decode_embedded():
    def test_joins_chunks(expect):
        text = base64.b64encode(b"descriptor bytes").decode()
        chunks = [text[i : i + 4] for i in range(0, len(text), 4)]
        expect(decode_embedded(chunks)) == b"descriptor bytes"

    def test_invalid_base64(expect):
        with raises(DecodeError):
            decode_embedded(["not base64!"])
