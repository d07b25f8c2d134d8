"""Java Generator - generates Jackson-annotated Java classes from the IR"""

from pathlib import Path

from .errors import GenerationError
from .ir import IntermediateRepresentation
from .types import (
    DataEnum, DataEnumStyle, DataEnumVariant, Enum, Field, GeneratedClass, ObjectVariant,
    Struct, TupleVariant, UnitVariant,
)

DATA_ENUM_IMPORTS = [
    "import com.fasterxml.jackson.annotation.JsonIgnore;",
    "import com.fasterxml.jackson.annotation.JsonInclude;",
    "import com.fasterxml.jackson.annotation.JsonProperty;",
    "import com.fasterxml.jackson.core.*;",
    "import com.fasterxml.jackson.databind.DeserializationContext;",
    "import com.fasterxml.jackson.databind.JsonNode;",
    "import com.fasterxml.jackson.databind.SerializerProvider;",
    "import com.fasterxml.jackson.databind.annotation.JsonDeserialize;",
    "import com.fasterxml.jackson.databind.annotation.JsonSerialize;",
    "import com.fasterxml.jackson.databind.deser.std.StdDeserializer;",
    "import com.fasterxml.jackson.databind.node.ObjectNode;",
    "import com.fasterxml.jackson.databind.ser.std.StdSerializer;",
    "import com.fasterxml.jackson.core.type.TypeReference;",
    "",
    "import java.io.IOException;",
]


def java_string(value: str) -> str:
    """Quote a value as a Java string literal"""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def indent(lines: list[str], level: int = 1) -> list[str]:
    pad = "    " * level
    return [pad + line if line else line for line in lines]


def check_balanced(code: str) -> bool:
    """Check that braces and parentheses outside string literals are balanced"""
    pairs = {"}": "{", ")": "("}
    stack = []
    in_string = False
    escape = False
    for ch in code:
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{(":
            stack.append(ch)
        elif ch in pairs:
            if not stack or stack.pop() != pairs[ch]:
                return False
    return not stack and not in_string


class JavaGenerator:
    """Generates one Java class per struct, enum and data enum"""

    def __init__(self, ir: IntermediateRepresentation):
        self.ir = ir

    def generate(self) -> list[GeneratedClass]:
        """Generate all classes; fails as a whole if any class cannot be rendered"""
        classes = []
        for entity in self.ir.defined_types():
            if isinstance(entity, Struct):
                classes.append(self.generate_struct_class(entity))
            elif isinstance(entity, Enum):
                classes.append(self.generate_enum_class(entity))
            else:
                classes.append(self.generate_data_enum_class(entity))
        return classes

    def _render(self, name: str, lines: list[str]) -> GeneratedClass:
        code = "\n".join(lines) + "\n"
        if not check_balanced(code):
            raise GenerationError(f"Failed to generate Java code for {name}")
        return GeneratedClass(name, code)

    # ══════════════════════════════════════════════════════════════
    # Structs
    # ══════════════════════════════════════════════════════════════

    def generate_struct_class(self, struct: Struct) -> GeneratedClass:
        """Generate a data class with a no-arg constructor and accessors"""
        class_name = struct.self_type.type_name
        lines = [
            "import com.fasterxml.jackson.annotation.JsonProperty;",
            "",
            f"public class {class_name} {{",
        ]
        for f in struct.fields:
            lines.extend(indent(self._field_declaration(f)))
        lines.extend(indent([f"public {class_name}() {{}}", ""]))
        for f in struct.fields:
            lines.extend(indent(self._access_methods(f)))
        lines.append("}")
        return self._render(class_name, lines)

    def _field_declaration(self, f: Field) -> list[str]:
        return [
            f"@JsonProperty({java_string(f.json_name)})",
            f"private {f.field_type} {f.name.as_camel_case()};",
            "",
        ]

    def _access_methods(self, f: Field) -> list[str]:
        pascal = f.name.as_pascal_case()
        camel = f.name.as_camel_case()
        return [
            f"public {f.field_type} get{pascal}() {{",
            f"    return {camel};",
            "}",
            "",
            f"public void set{pascal}({f.field_type} {camel}) {{",
            f"    this.{camel} = {camel};",
            "}",
            "",
        ]

    # ══════════════════════════════════════════════════════════════
    # Enums
    # ══════════════════════════════════════════════════════════════

    def generate_enum_class(self, enum_ir: Enum) -> GeneratedClass:
        """Generate a Java enum with one @JsonProperty constant per variant"""
        class_name = enum_ir.self_type.type_name
        lines = [
            "import com.fasterxml.jackson.annotation.JsonProperty;",
            "",
            f"public enum {class_name} {{",
        ]
        for i, variant in enumerate(enum_ir.variants):
            comma = "," if i < len(enum_ir.variants) - 1 else ""
            lines.append(f"    @JsonProperty({java_string(variant.json_name)})")
            lines.append(f"    {variant.name.as_upper_snake_case()}{comma}")
        lines.append("}")
        return self._render(class_name, lines)

    # ══════════════════════════════════════════════════════════════
    # Data enums
    # ══════════════════════════════════════════════════════════════

    def generate_data_enum_class(self, de: DataEnum) -> GeneratedClass:
        """Generate a wrapper class holding a discriminant and an opaque payload"""
        if de.style is not DataEnumStyle.EXTERNAL:
            raise GenerationError(f"Unsupported data enum style for {de.self_type}: {de.style}")
        class_name = de.self_type.type_name
        de.check_holder_names({"Variant", "Serializer", "Deserializer", class_name})

        body = [
            "@JsonIgnore",
            "private final Variant variant;",
            "",
            "@JsonIgnore",
            "private final Object value;",
            "",
            f"private {class_name}(Variant variant, Object value) {{",
            "    this.variant = variant;",
            "    this.value = value;",
            "}",
            "",
        ]
        for variant in de.variants:
            body.extend(self._variant_members(class_name, variant))
        body.extend(self._external_serializer(de))
        body.extend(self._external_deserializer(de))
        body.extend(self._variants_enum(de))
        body.extend([
            "Variant getVariant() {",
            "    return variant;",
            "}",
        ])

        lines = DATA_ENUM_IMPORTS + [
            "",
            "@JsonInclude(JsonInclude.Include.NON_NULL)",
            f"@JsonSerialize(using = {class_name}.Serializer.class)",
            f"@JsonDeserialize(using = {class_name}.Deserializer.class)",
            f"public class {class_name} {{",
            *indent(body),
            "}",
        ]
        return self._render(class_name, lines)

    def _variants_enum(self, de: DataEnum) -> list[str]:
        names = [v.name.as_upper_snake_case() for v in de.variants]
        return [
            "public enum Variant {",
            "    " + ", ".join(names),
            "}",
            "",
        ]

    def _variant_members(self, class_name: str, v: DataEnumVariant) -> list[str]:
        pascal = v.name.as_pascal_case()
        case = v.name.as_upper_snake_case()
        if isinstance(v, UnitVariant):
            lines = [
                f"public static {class_name} of{pascal}() {{",
                f"    return new {class_name}(Variant.{case}, null);",
                "}",
                "",
            ]
        elif isinstance(v, ObjectVariant):
            lines = self._object_variant_members(class_name, v)
        else:
            lines = self._tuple_variant_members(class_name, v)
        lines.extend([
            f"public boolean is{pascal}() {{",
            f"    return variant == Variant.{case};",
            "}",
            "",
        ])
        return lines

    def _variant_check(self, case: str) -> list[str]:
        return [
            f"    if (variant != Variant.{case}) {{",
            '        throw new IllegalStateException("Invalid variant: " + variant);',
            "    }",
        ]

    def _object_variant_members(self, class_name: str, v: ObjectVariant) -> list[str]:
        holder = v.name.as_pascal_case()
        case = v.name.as_upper_snake_case()
        params = ", ".join(
            f"@JsonProperty({java_string(f.json_name)}) {f.field_type} {f.name.as_camel_case()}"
            for f in v.fields
        )
        holder_body = [f"private final {f.field_type} {f.name.as_camel_case()};" for f in v.fields]
        holder_body.extend(["", f"public {holder}({params}) {{"])
        holder_body.extend(
            f"    this.{f.name.as_camel_case()} = {f.name.as_camel_case()};" for f in v.fields
        )
        holder_body.extend(["}", ""])
        for f in v.fields:
            holder_body.extend([
                f"@JsonProperty({java_string(f.json_name)})",
                f"public {f.field_type} get{f.name.as_pascal_case()}() {{",
                f"    return {f.name.as_camel_case()};",
                "}",
                "",
            ])

        return [
            f"public static {class_name} of{holder}({holder} value) {{",
            f"    return new {class_name}(Variant.{case}, value);",
            "}",
            "",
            f"public {holder} get{holder}() {{",
            *self._variant_check(case),
            f"    return ({holder}) value;",
            "}",
            "",
            f"public static class {holder} {{",
            *indent(holder_body),
            "}",
            "",
        ]

    def _tuple_variant_members(self, class_name: str, v: TupleVariant) -> list[str]:
        pascal = v.name.as_pascal_case()
        case = v.name.as_upper_snake_case()
        args = ", ".join(f"{t} arg{i}" for i, t in enumerate(v.fields))
        objects = ", ".join(f"arg{i}" for i in range(v.arity))
        lines = [
            f"public static {class_name} of{pascal}({args}) {{",
            f"    return new {class_name}(Variant.{case}, new Object[] {{{objects}}});",
            "}",
            "",
        ]
        numbered = v.arity != 1
        for i, t in enumerate(v.fields):
            getter = f"get{pascal}{i}" if numbered else f"get{pascal}"
            lines.extend([
                '@SuppressWarnings("unchecked")',
                f"public {t} {getter}() {{",
                *self._variant_check(case),
                f"    return ({t}) ((Object[]) value)[{i}];",
                "}",
                "",
            ])
        return lines

    # ══════════════════════════════════════════════════════════════
    # External tagging codec
    # ══════════════════════════════════════════════════════════════

    def _external_serializer(self, de: DataEnum) -> list[str]:
        class_name = de.self_type.type_name
        cases = []
        for v in de.variants:
            tag = java_string(v.json_name)
            if isinstance(v, UnitVariant):
                write = [f"gen.writeString({tag});"]
            else:
                payload = "((Object[]) value.value)[0]" if (
                    isinstance(v, TupleVariant) and v.arity == 1) else "value.value"
                write = [
                    "gen.writeStartObject();",
                    f"gen.writeObjectField({tag}, {payload});",
                    "gen.writeEndObject();",
                ]
            cases.extend([
                f"case {v.name.as_upper_snake_case()}: {{",
                *indent(write),
                "}",
                "break;",
            ])

        return [
            f"public static class Serializer extends StdSerializer<{class_name}> {{",
            "    public Serializer() {",
            f"        super({class_name}.class);",
            "    }",
            "",
            "    @Override",
            f"    public void serialize({class_name} value, JsonGenerator gen, SerializerProvider provider) throws IOException {{",
            "        switch (value.getVariant()) {",
            *indent(cases, 3),
            "        }",
            "    }",
            "}",
            "",
        ]

    def _external_deserializer(self, de: DataEnum) -> list[str]:
        class_name = de.self_type.type_name
        unit_cases = []
        object_cases = []
        for v in de.variants:
            case = v.name.as_upper_snake_case()
            tag = java_string(v.json_name)
            if isinstance(v, UnitVariant):
                unit_cases.extend([
                    f"if (p.getText().equals({tag})) {{",
                    f"    return new {class_name}(Variant.{case}, null);",
                    "}",
                ])
            elif isinstance(v, ObjectVariant):
                holder = v.name.as_pascal_case()
                object_cases.extend([
                    f"if (node.has({tag})) {{",
                    f"    return new {class_name}(Variant.{case}, "
                    f"parseField(ctxt, node, {tag}, new TypeReference<{holder}>(){{}})[0]);",
                    "}",
                ])
            else:
                refs = ", ".join(f"new TypeReference<{t}>(){{}}" for t in v.fields)
                object_cases.extend([
                    f"if (node.has({tag})) {{",
                    f"    return new {class_name}(Variant.{case}, parseField(ctxt, node, {tag}, {refs}));",
                    "}",
                ])

        return [
            f"public static class Deserializer extends StdDeserializer<{class_name}> {{",
            "    public Deserializer() {",
            f"        super({class_name}.class);",
            "    }",
            "",
            "    private Object[] parseField(DeserializationContext ctxt, ObjectNode node, String key, TypeReference<?>... types) throws IOException {",
            "        JsonNode field = node.get(key);",
            "        if (field == null) {",
            "            return new Object[types.length];",
            "        }",
            "        if (types.length == 1) {",
            "            try (JsonParser parser = field.traverse(ctxt.getParser().getCodec())) {",
            "                return new Object[]{parser.readValueAs(types[0])};",
            "            }",
            "        }",
            "        if (!field.isArray() || field.size() != types.length) {",
            "            throw new JsonParseException(ctxt.getParser(), "
            f"\"Cannot deserialize {class_name}: expected array of size \" + types.length + \" for field \" + key);",
            "        }",
            "        Object[] result = new Object[types.length];",
            "        for (int i = 0; i < types.length; i++) {",
            "            try (JsonParser parser = field.get(i).traverse(ctxt.getParser().getCodec())) {",
            "                result[i] = parser.readValueAs(types[i]);",
            "            }",
            "        }",
            "        return result;",
            "    }",
            "",
            "    @Override",
            f"    public {class_name} deserialize(JsonParser p, DeserializationContext ctxt) throws IOException, JacksonException {{",
            "        if (p.currentToken() == JsonToken.VALUE_STRING) {",
            *indent(unit_cases, 3),
            "        } else if (p.currentToken() == JsonToken.START_OBJECT) {",
            "            ObjectNode node = (ObjectNode) p.getCodec().readTree(p);",
            *indent(object_cases, 3),
            "        }",
            f"        throw ctxt.instantiationException({class_name}.class, "
            f"\"Cannot deserialize \" + {java_string(class_name)});",
            "    }",
            "}",
            "",
        ]


def generate_java_code(ir: IntermediateRepresentation) -> list[GeneratedClass]:
    """Generate Java classes for every type collected in ``ir``"""
    return JavaGenerator(ir).generate()


def write_java(classes: list[GeneratedClass], package: str, directory) -> list[Path]:
    """Write classes to ``directory/<package path>/<Name>.java``"""
    package_dir = Path(directory) / package.replace(".", "/")
    written = []
    try:
        package_dir.mkdir(parents=True, exist_ok=True)
        for cls in classes:
            path = package_dir / f"{cls.name}.java"
            path.write_text(f"package {package};\n\n{cls.code}", encoding="utf-8")
            written.append(path)
    except OSError as exc:
        raise GenerationError(f"Failed to write Java sources to {package_dir}: {exc}") from exc
    return written
