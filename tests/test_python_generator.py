import json

import pytest

from dtogen import (
    CustomType, GeneratedClass, GenerationError, IntermediateRepresentation, Name, Struct, TypeTarget,
    Variant, data_enum, f64, generate, generate_python_code, i32, write_python,
)
from dtogen.runtime import DeserializationError, InvalidVariantError, dumps, loads

from .models import (
    Ambiguous, B, Department, Employee, Float, Format, List, Node, Order, Price, SampleEnum, Value,
)


@pytest.fixture
def formats(load_package):
    return load_package(generate(TypeTarget.PYTHON, Format)).Format


def test_scenario_wire_format(formats):
    xml = formats.of_xml(3.5, 7)
    unit = formats.of_unit()
    other = formats.of_other("x")

    assert dumps(xml) == '{"XML":[3.5,7]}'
    assert dumps(unit) == '"Unit"'
    assert dumps(other) == '{"Other":{"name":"x"}}'
    assert dumps(formats.of_csv("a,b")) == '{"Csv":"a,b"}'
    assert dumps(formats.of_json(42)) == '{"Json":42}'

    for value in (xml, unit, other):
        assert loads(dumps(value), formats) == value


def test_accessors(formats):
    xml = formats.of_xml(3.5, 7)
    assert xml.is_xml()
    assert not xml.is_unit()
    assert xml.get_xml0() == 3.5
    assert xml.get_xml1() == 7
    assert formats.of_csv("c").get_csv() == "c"
    assert formats.of_other("x").get_other().name == "x"
    assert xml.variant is formats.Variant.XML


def test_wrong_accessor_is_invalid_state(formats):
    with pytest.raises(InvalidVariantError, match="Invalid variant: UNIT"):
        formats.of_unit().get_csv()
    with pytest.raises(RuntimeError):
        formats.of_csv("c").get_other()


def test_arity_enforcement(formats):
    with pytest.raises(DeserializationError, match="expected array of size 2 for field XML"):
        loads('{"XML":[3.5]}', formats)
    with pytest.raises(DeserializationError):
        loads('{"XML":[3.5,7,9]}', formats)
    with pytest.raises(DeserializationError):
        loads('{"XML":3.5}', formats)


def test_unrecognized_input(formats):
    with pytest.raises(DeserializationError, match="Cannot deserialize Format"):
        loads('{"Nope":1}', formats)
    with pytest.raises(DeserializationError, match="Cannot deserialize Format"):
        loads('"Csv"', formats)
    with pytest.raises(DeserializationError, match="Cannot deserialize Format"):
        loads("12", formats)


def test_ambiguous_object_resolves_to_first_declared_variant(load_package):
    ambiguous = load_package(generate(TypeTarget.PYTHON, Ambiguous)).Ambiguous
    value = loads('{"Second":"x","First":1}', ambiguous)
    assert value.is_first()
    assert value.get_first() == 1
    assert loads('"none"', ambiguous) == ambiguous.of_empty()
    assert dumps(ambiguous.of_empty()) == '"none"'


def test_generic_recursive_data_enum_round_trip(load_package):
    package = load_package(generate(TypeTarget.PYTHON, SampleEnum[i32]))
    sample = package.SampleEnumI32
    values = [
        sample.of_csv("test"),
        sample.of_json(42),
        sample.of_xml(3.13467, 57),
        sample.of_yaml(42),
        sample.of_other("test"),
        sample.of_unit(),
        sample.of_list([1, 2, 3]),
        sample.of_nested(sample.of_unit()),
        sample.of_nested(sample.of_nested(sample.of_xml(1.5, 2))),
    ]
    for value in values:
        assert loads(dumps(value), sample) == value

    assert dumps(sample.of_other("test")) == '{"Other":{"other":"test"}}'
    assert dumps(sample.of_list([1, 2, 3])) == '{"List":[1,2,3]}'
    assert dumps(sample.of_nested(sample.of_unit())) == '{"Nested":"Unit"}'
    assert loads('{"Nested":"Unit"}', sample).get_nested().is_unit()


def test_struct_round_trip_with_rename(load_package):
    package = load_package(generate(TypeTarget.PYTHON, B[i32, f64]))
    b = package.BI32F64(k=1, v=1.0, a=package.A(a=1, b=2))
    text = dumps(b)
    assert json.loads(text) == {"k": 1, "hello": 1.0, "a": {"a": 1, "b": 2}}
    assert loads(text, package.BI32F64) == b


def test_struct_has_no_argument_constructor(load_package):
    package = load_package(generate(TypeTarget.PYTHON, B[i32, f64]))
    b = package.BI32F64()
    assert b.k is None and b.v is None and b.a is None
    assert dumps(b) == '{"k":null,"hello":null,"a":null}'


def test_enum_round_trip(load_package):
    package = load_package(generate(TypeTarget.PYTHON, Value))
    for member in package.ExportType:
        value = package.Value(value=member)
        assert loads(dumps(value), package.Value) == value
    assert dumps(package.Value(value=package.ExportType.JSON)) == '{"value":"Json"}'
    with pytest.raises(DeserializationError):
        loads('{"value":"YAML"}', package.Value)


def test_nested_containers_round_trip(load_package):
    package = load_package(generate(TypeTarget.PYTHON, Order))
    address = package.Address(street="Main St 1", city="Springfield")
    order = package.Order(
        order_id=7,
        billing=address,
        shipping=None,
        tags={"gift": [address, package.Address(street="Elm 2", city="Shelbyville")]},
        status=package.Format.of_xml(1.0, 2),
        scores={1: 0.5, 2: 3.0},
    )
    text = dumps(order)
    assert json.loads(text)["scores"] == {"1": 0.5, "2": 3.0}
    assert loads(text, package.Order) == order


def test_recursive_structs_round_trip(load_package):
    package = load_package(generate(TypeTarget.PYTHON, Node, Employee, Department))
    root = package.Node(label="root", children=[package.Node(label="leaf", children=[])])
    assert loads(dumps(root), package.Node) == root

    dept = package.Department(name="R&D", manager=package.Employee(name="Ada", department=None))
    assert loads(dumps(dept), package.Department) == dept


def test_generated_modules_are_named_after_classes():
    classes = generate(TypeTarget.PYTHON, SampleEnum[i32])
    assert [c.name for c in classes] == ["SampleEnumI32"]
    assert "from dtogen import runtime as _rt" in classes[0].code
    assert "def get_xml0(self):" in classes[0].code
    assert "def get_csv(self):" in classes[0].code


def test_invalid_source_fails_generation():
    ir = IntermediateRepresentation(TypeTarget.PYTHON)
    ir.add_struct(Struct(Name.from_pascal_case("Bad"), CustomType("Not Valid")))
    with pytest.raises(GenerationError, match="Not Valid"):
        generate_python_code(ir)


def test_classes_named_after_builtins_round_trip(load_package):
    package = load_package(generate(TypeTarget.PYTHON, Price, List))
    price = package.Price(value=package.Float(amount=1.5), raw=2.0)
    assert loads(dumps(price), package.Price) == price

    items = package.List(items=[1, 2])
    assert dumps(items) == '{"items":[1,2]}'
    assert loads(dumps(items), package.List) == items


def test_module_name_collision_is_rejected(tmp_path):
    classes = [GeneratedClass("CA", "x = 1\n"), GeneratedClass("Ca", "x = 2\n")]
    with pytest.raises(GenerationError, match="ca.py"):
        write_python(classes, "collide", tmp_path)
    assert not (tmp_path / "collide").exists()


@data_enum
class Shadowing:
    Unit = Variant.unit()
    Variant = Variant.object(name=str)


def test_holder_shadowing_variant_enum_is_rejected():
    with pytest.raises(GenerationError, match="Object variant Variant of Shadowing"):
        generate(TypeTarget.PYTHON, Shadowing)
