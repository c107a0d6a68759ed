"""Tests for message base classes, extension handles and lite bootstrap"""

from google.protobuf import descriptor_pb2, descriptor_pool
from pytest import raises

from protoboot.proto import (
    Extension,
    FieldAccessorTable,
    FieldType,
    Label,
    Message,
    SlotError,
    SlotTable,
    TypeHandle,
)
from protoboot.proto.errors import DescriptorError
from protoboot.proto.lite import bootstrap_lite

_slots = SlotTable("internal_static_Pair_descriptor")


class Pair(Message):
    _slot_table = _slots
    _descriptor_slot = "internal_static_Pair_descriptor"
    _field_names = ("key", "values")
    _repeated_fields = frozenset({"values"})


def _weight_file():
    raw = descriptor_pb2.FileDescriptorProto(name="w.proto")
    box = raw.message_type.add(name="Box")
    box.field.add(name="a", number=1, type=FieldType.INT32, label=Label.OPTIONAL)
    box.field.add(name="b", number=2, type=FieldType.INT32, label=Label.OPTIONAL)
    box.extension_range.add(start=100, end=200)
    raw.extension.add(
        name="weight", number=100, type=FieldType.INT32, label=Label.OPTIONAL, extendee=".Box"
    )
    return descriptor_pool.DescriptorPool().AddSerializedFile(raw.SerializeToString())


def describe_message():
    def test_defaults(expect):
        pair = Pair()
        expect(pair.key) == None
        expect(pair.values) == []

    def test_keyword_construction(expect):
        expect(Pair(key="a", values=[1])) == Pair(key="a", values=[1])
        expect(Pair(key="a")) != Pair(key="b")
        expect(repr(Pair(key="a"))) == "Pair(key='a', values=[])"

    def test_unknown_field(expect):
        with raises(TypeError):
            Pair(other=1)

    def test_unhashable(expect):
        with raises(TypeError):
            hash(Pair())

    def test_no_accessor_table_in_lite_mode(expect):
        with raises(SlotError):
            Pair.accessor_table()


def describe_extension():
    def test_bind(expect):
        file = _weight_file()
        weight = Extension("weight", 100, "Box", FieldType.INT32)
        weight.bind(file.extensions_by_name["weight"])

        expect(weight.descriptor is file.extensions_by_name["weight"]) == True
        expect(weight.is_repeated) == False

    def test_bind_twice(expect):
        file = _weight_file()
        weight = Extension("weight", 100, "Box", FieldType.INT32)
        weight.bind(file.extensions_by_name["weight"])

        with raises(SlotError):
            weight.bind(file.extensions_by_name["weight"])

    def test_bind_mismatch(expect):
        file = _weight_file()
        other = Extension("weight", 101, "Box", FieldType.INT32, Label.REPEATED)

        with raises(DescriptorError):
            other.bind(file.extensions_by_name["weight"])


def describe_field_accessor_table():
    def test_maps_names_by_position(expect):
        box = _weight_file().message_types_by_name["Box"]
        table = FieldAccessorTable(box, ("a_", "b"))

        expect(table["a_"].name) == "a"
        expect(list(table)) == ["a_", "b"]
        expect(len(table)) == 2

    def test_count_mismatch(expect):
        box = _weight_file().message_types_by_name["Box"]
        with raises(DescriptorError):
            FieldAccessorTable(box, ("a",))


def describe_bootstrap_lite():
    def test_fills_type_slots(expect):
        slots = SlotTable("internal_static_Pair_descriptor")

        def initialize(slots):
            slots.assign("internal_static_Pair_descriptor", TypeHandle("Pair", Pair))

        bootstrap_lite("pair.proto", initialize, slots)

        expect(slots.get("internal_static_Pair_descriptor").message_class is Pair) == True

    def test_unassigned_slot(expect):
        with raises(SlotError):
            bootstrap_lite("pair.proto", lambda slots: None, SlotTable("a"))
