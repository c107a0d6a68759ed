"""Tests for the extension registry"""

from pytest import raises

from protoboot.proto import Extension, ExtensionRegistry, FieldType
from protoboot.proto.errors import DescriptorError, ExtensionConflictError


def _ext(full_name, number, extendee="geo.Point"):
    return Extension(full_name, number, extendee, FieldType.INT32)


def describe_extension_registry():
    def test_find(expect):
        registry = ExtensionRegistry()
        weight = _ext("geo.weight", 100)
        registry.add(weight)

        expect(registry.find("geo.Point", 100) is weight) == True
        expect(registry.find("geo.Point", 101)) == None
        expect(registry.find_by_name("geo.weight") is weight) == True
        expect("geo.weight" in registry) == True
        expect(len(registry)) == 1

    def test_duplicate_registration_is_a_noop(expect):
        registry = ExtensionRegistry()
        weight = _ext("geo.weight", 100)
        registry.add(weight)
        registry.add(weight)
        # A reloaded module creates a new handle for the same extension
        registry.add(_ext("geo.weight", 100))

        expect(len(registry)) == 1
        expect(registry.find("geo.Point", 100) is weight) == True

    def test_conflicting_extension(expect):
        registry = ExtensionRegistry()
        registry.add(_ext("geo.weight", 100))

        with raises(ExtensionConflictError):
            registry.add(_ext("shapes.area", 100))

    def test_same_number_on_different_extendees(expect):
        registry = ExtensionRegistry()
        registry.add(_ext("geo.weight", 100))
        registry.add(_ext("shapes.weight", 100, extendee="shapes.Shape"))

        expect(len(registry)) == 2

    def test_extensions_for_orders_by_number(expect):
        registry = ExtensionRegistry()
        registry.add(_ext("geo.b", 102))
        registry.add(_ext("geo.a", 101))
        registry.add(_ext("shapes.c", 100, extendee="shapes.Shape"))

        names = [e.full_name for e in registry.extensions_for("geo.Point")]
        expect(names) == ["geo.a", "geo.b"]

    def test_frozen(expect):
        registry = ExtensionRegistry()
        registry.freeze()

        expect(registry.frozen) == True
        with raises(DescriptorError):
            registry.add(_ext("geo.weight", 100))
