"""Tests for static slot declaration and the initialize pass"""

import os

from protoboot.generator import load
from protoboot.generator.slots import SlotKind, declare_slots, initializer_lines

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def _shapes():
    with open(FILE_DIR + "/shapes.json", encoding="utf-8") as f:
        return load(f.read())


def describe_declare_slots():
    def test_full_mode(expect):
        slots = declare_slots(_shapes().find("shapes.proto"))

        expect([s.name for s in slots]) == [
            "descriptor",
            "internal_static_shapes.Shape_descriptor",
            "internal_static_shapes.Shape_accessor_table",
            "internal_static_shapes.Shape.Style_descriptor",
            "internal_static_shapes.Shape.Style_accessor_table",
        ]
        expect(slots[0].kind) == SlotKind.FILE
        expect(slots[3].type_name) == "shapes.Shape.Style"

    def test_lite_mode(expect):
        slots = declare_slots(_shapes().find("shapes.proto"), lite=True)

        expect([s.name for s in slots]) == [
            "internal_static_shapes.Shape_descriptor",
            "internal_static_shapes.Shape.Style_descriptor",
        ]
        expect({s.kind for s in slots}) == {SlotKind.DESCRIPTOR}

    def test_file_without_messages(expect):
        slots = declare_slots(_shapes().find("options.proto"))
        expect([s.name for s in slots]) == ["descriptor"]

    def test_visit_order_is_depth_first(expect):
        unit = load(
            {
                "files": [
                    {
                        "name": "t.proto",
                        "message_types": [
                            {"name": "A", "nested_types": [{"name": "B"}, {"name": "C"}]},
                            {"name": "D"},
                        ],
                    }
                ]
            }
        ).files[0]
        slots = declare_slots(unit, lite=True)

        expect([s.type_name for s in slots]) == ["A", "A.B", "A.C", "D"]


def describe_initializer_lines():
    def test_full_mode(expect):
        lines = initializer_lines(_shapes().find("shapes.proto"))

        expect(lines) == [
            'slots.assign("descriptor", root)',
            'slots.assign("internal_static_shapes.Shape_descriptor", '
            'root.message_types_by_name["Shape"])',
            'slots.assign("internal_static_shapes.Shape_accessor_table", '
            '_pbm.FieldAccessorTable(slots.get("internal_static_shapes.Shape_descriptor"), '
            '("name", "center", "children", "kind", "style")))',
            'slots.assign("internal_static_shapes.Shape.Style_descriptor", '
            'slots.get("internal_static_shapes.Shape_descriptor").nested_types_by_name["Style"])',
            'slots.assign("internal_static_shapes.Shape.Style_accessor_table", '
            '_pbm.FieldAccessorTable(slots.get("internal_static_shapes.Shape.Style_descriptor"), '
            '("color", "unit")))',
            'weight.bind(root.extensions_by_name["weight"])',
            'Shape.area.bind('
            'slots.get("internal_static_shapes.Shape_descriptor").extensions_by_name["area"])',
        ]

    def test_lite_mode(expect):
        lines = initializer_lines(_shapes().find("shapes.proto"), lite=True)

        expect(lines) == [
            'slots.assign("internal_static_shapes.Shape_descriptor", '
            '_pbl.TypeHandle("shapes.Shape", Shape))',
            'slots.assign("internal_static_shapes.Shape.Style_descriptor", '
            '_pbl.TypeHandle("shapes.Shape.Style", Shape.Style))',
        ]

    def test_single_field_tuple(expect):
        unit = load(
            {
                "files": [
                    {
                        "name": "t.proto",
                        "message_types": [
                            {"name": "A", "fields": [{"name": "id", "number": 1, "type": "int64"}]}
                        ],
                    }
                ]
            }
        ).files[0]
        expect(initializer_lines(unit)[2]) == (
            'slots.assign("internal_static_A_accessor_table", '
            '_pbm.FieldAccessorTable(slots.get("internal_static_A_descriptor"), ("id",)))'
        )
