import re

import pytest

from dtogen import (
    CustomType, Enum, EnumVariant, Field, GenerationError, IntermediateRepresentation, Name,
    Struct, Type, TypeTarget, Variant, data_enum, f64, generate, generate_java_code, i32,
    write_java,
)
from dtogen.java_generator import check_balanced

from .models import Ambiguous, B, Format, SampleEnum, Value


def by_name(classes):
    return {c.name: c.code for c in classes}


def test_generate_basic_struct_class():
    ir = IntermediateRepresentation(TypeTarget.JAVA)
    struct_ir = Struct(Name.from_pascal_case("TestStruct"), CustomType("TestStruct"))
    struct_ir.fields.append(Field(Name.from_snake_case("complex_name"), "otherName", Type("String")))
    ir.add_struct(struct_ir)

    classes = generate_java_code(ir)
    assert len(classes) == 1
    assert classes[0].name == "TestStruct"
    code = classes[0].code
    assert '@JsonProperty("otherName")\n    private String complexName;' in code
    assert "public TestStruct() {}" in code
    assert "public String getComplexName() {" in code
    assert "public void setComplexName(String complexName) {" in code


def test_generate_basic_enum_class():
    ir = IntermediateRepresentation(TypeTarget.JAVA)
    enum_ir = Enum(Name.from_pascal_case("TestEnum"), CustomType("TestEnum"))
    enum_ir.variants.append(EnumVariant(Name.from_pascal_case("Test"), "TEST_OPTION"))
    enum_ir.variants.append(EnumVariant(Name.from_pascal_case("Test2"), "TEST2_OPTION"))
    ir.add_enum(enum_ir)

    code = generate_java_code(ir)[0].code
    assert "public enum TestEnum {" in code
    assert '@JsonProperty("TEST_OPTION")\n    TEST,' in code
    assert '@JsonProperty("TEST2_OPTION")\n    TEST2\n}' in code


def test_generic_struct_and_dependencies():
    classes = by_name(generate(TypeTarget.JAVA, B[i32, f64]))
    assert set(classes) == {"A", "BIntegerDouble"}
    code = classes["BIntegerDouble"]
    assert "public class BIntegerDouble {" in code
    assert '@JsonProperty("hello")\n    private Double v;' in code
    assert "private A a;" in code


def test_enum_field():
    classes = by_name(generate(TypeTarget.JAVA, Value))
    assert "private ExportType value;" in classes["Value"]
    assert '@JsonProperty("Json")\n    JSON,' in classes["ExportType"]


def test_data_enum_members():
    code = by_name(generate(TypeTarget.JAVA, SampleEnum[i32]))["SampleEnumInteger"]
    assert "@JsonSerialize(using = SampleEnumInteger.Serializer.class)" in code
    assert "@JsonDeserialize(using = SampleEnumInteger.Deserializer.class)" in code
    assert "private SampleEnumInteger(Variant variant, Object value) {" in code
    assert "CSV, JSON, XML, YAML, OTHER, UNIT, LIST, NESTED" in code

    assert "public static SampleEnumInteger ofXml(Double arg0, Integer arg1) {" in code
    assert "new Object[] {arg0, arg1}" in code
    assert "public Double getXml0() {" in code
    assert "public Integer getXml1() {" in code
    assert "public String getCsv() {" in code
    assert "getCsv0" not in code
    assert "public java.util.List<Integer> getList() {" in code
    assert "public SampleEnumInteger getNested() {" in code

    assert "public static SampleEnumInteger ofUnit() {" in code
    assert "return new SampleEnumInteger(Variant.UNIT, null);" in code
    assert "public boolean isUnit() {" in code

    assert "public static SampleEnumInteger ofOther(Other value) {" in code
    assert "public static class Other {" in code
    assert 'public Other(@JsonProperty("other") String name) {' in code
    assert 'throw new IllegalStateException("Invalid variant: " + variant);' in code


def test_external_serializer_shapes():
    code = by_name(generate(TypeTarget.JAVA, Format))["Format"]
    assert 'gen.writeString("Unit");' in code
    assert 'gen.writeObjectField("Csv", ((Object[]) value.value)[0]);' in code
    assert 'gen.writeObjectField("XML", value.value);' in code
    assert 'gen.writeObjectField("Other", value.value);' in code


def test_external_deserializer_checks_tags_in_declaration_order():
    code = by_name(generate(TypeTarget.JAVA, Ambiguous))["Ambiguous"]
    first = code.index('if (node.has("First"))')
    second = code.index('if (node.has("Second"))')
    assert first < second
    assert 'if (p.getText().equals("none")) {' in code
    assert 'new TypeReference<Long>(){}' in code
    assert 'Cannot deserialize " + "Ambiguous"' in code


def test_external_deserializer_enforces_arity():
    code = by_name(generate(TypeTarget.JAVA, Format))["Format"]
    assert "field.size() != types.length" in code
    assert re.search(r'parseField\(ctxt, node, "XML", new TypeReference<Double>\(\)\{\}, '
                     r'new TypeReference<Long>\(\)\{\}\)', code)


def test_json_names_are_escaped():
    ir = IntermediateRepresentation(TypeTarget.JAVA)
    struct_ir = Struct(Name.from_pascal_case("Quoted"), CustomType("Quoted"))
    struct_ir.fields.append(Field(Name.from_snake_case("a"), 'we"ird{', Type("String")))
    ir.add_struct(struct_ir)
    code = generate_java_code(ir)[0].code
    assert '@JsonProperty("we\\"ird{")' in code


def test_unbalanced_output_fails_generation():
    ir = IntermediateRepresentation(TypeTarget.JAVA)
    ir.add_struct(Struct(Name.from_pascal_case("Broken"), CustomType("Broken{")))
    with pytest.raises(GenerationError, match="Broken"):
        generate_java_code(ir)


def test_check_balanced():
    assert check_balanced('a { b("}") }')
    assert not check_balanced("a { b(")
    assert not check_balanced("a } {")


def test_write_java(tmp_path):
    classes = generate(TypeTarget.JAVA, B[i32, f64])
    written = write_java(classes, "com.example", tmp_path / "src/main/java")
    package_dir = tmp_path / "src/main/java/com/example"
    assert sorted(p.name for p in written) == ["A.java", "BIntegerDouble.java"]
    text = (package_dir / "A.java").read_text()
    assert text.startswith("package com.example;\n\n")


@data_enum
class Message:
    Empty = Variant.unit()
    Serializer = Variant.object(format=str)
    Message = Variant.object(body=str)


def test_holder_clashing_with_generated_members_is_rejected():
    with pytest.raises(GenerationError, match="Object variant Serializer of Message"):
        generate(TypeTarget.JAVA, Message)
