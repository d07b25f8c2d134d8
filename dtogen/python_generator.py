"""Python Generator - generates Python classes backed by dtogen.runtime"""

import keyword
from pathlib import Path

from .errors import GenerationError
from .ir import IntermediateRepresentation
from .name import Name
from .types import (
    DataEnum, DataEnumStyle, DataEnumVariant, Enum, GeneratedClass, ObjectVariant, Struct,
    TupleVariant, UnitVariant,
)

HEADER = [
    "# AUTO-GENERATED - DO NOT EDIT",
    "import enum",
    "",
    "from dtogen import runtime as _rt",
    "",
    "",
]


def py_ident(name: str) -> str:
    """Avoid clashing with Python keywords"""
    return f"{name}_" if keyword.iskeyword(name) else name


def module_name(class_name: str) -> str:
    return py_ident(Name.from_pascal_case(class_name).as_snake_case())


def indent(lines: list[str], level: int = 1) -> list[str]:
    pad = "    " * level
    return [pad + line if line else line for line in lines]


class PythonGenerator:
    """Generates one Python module per struct, enum and data enum"""

    def __init__(self, ir: IntermediateRepresentation):
        self.ir = ir

    def generate(self) -> list[GeneratedClass]:
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
        code = "\n".join(HEADER + lines) + "\n"
        try:
            compile(code, f"{module_name(name)}.py", "exec")
        except SyntaxError as exc:
            raise GenerationError(f"Failed to generate Python code for {name}: {exc}") from exc
        return GeneratedClass(name, code)

    def _record_class(self, class_name: str, fields: list[tuple[str, str, str]]) -> list[str]:
        """Class body shared by structs and object-variant holders.

        ``fields`` holds ``(attribute, wire name, type hint)`` triples; the hints
        become string annotations of ``__init__``.
        """
        lines = [f"class {class_name}:", "    __json_fields__ = ("]
        lines.extend(f"        ({attr!r}, {wire!r})," for attr, wire, _ in fields)
        lines.extend(["    )", ""])

        params = "".join(f", {attr}: {hint!r} = None" for attr, _, hint in fields)
        lines.append(f"    def __init__(self{params}):")
        lines.extend(f"        self.{attr} = {attr}" for attr, _, _ in fields)
        if not fields:
            lines.append("        pass")

        values = "".join(f"self.{attr}, " for attr, _, _ in fields)
        others = "".join(f"other.{attr}, " for attr, _, _ in fields)
        shown = ", ".join(f"{attr}={{self.{attr}!r}}" for attr, _, _ in fields)
        lines.extend([
            "",
            "    def __eq__(self, other):",
            "        if not isinstance(other, type(self)):",
            "            return NotImplemented",
            f"        return ({values}) == ({others})",
            "",
            "    def __repr__(self):",
            f'        return f"{class_name}({shown})"',
            "",
            "    def to_json(self):",
            "        return _rt.encode_fields(self)",
            "",
            "    @classmethod",
            "    def from_json(cls, data):",
            "        return _rt.decode_fields(cls, data)",
        ])
        return lines

    def generate_struct_class(self, struct: Struct) -> GeneratedClass:
        class_name = struct.self_type.type_name
        fields = [
            (py_ident(f.name.as_snake_case()), f.json_name, f.field_type.type_name)
            for f in struct.fields
        ]
        return self._render(class_name, self._record_class(class_name, fields))

    def generate_enum_class(self, enum_ir: Enum) -> GeneratedClass:
        class_name = enum_ir.self_type.type_name
        lines = [f"class {class_name}(enum.Enum):"]
        lines.extend(
            f"    {py_ident(v.name.as_upper_snake_case())} = {v.json_name!r}" for v in enum_ir.variants
        )
        if not enum_ir.variants:
            lines.append("    pass")
        return self._render(class_name, lines)

    # ══════════════════════════════════════════════════════════════
    # Data enums
    # ══════════════════════════════════════════════════════════════

    def generate_data_enum_class(self, de: DataEnum) -> GeneratedClass:
        if de.style is not DataEnumStyle.EXTERNAL:
            raise GenerationError(f"Unsupported data enum style for {de.self_type}: {de.style}")
        class_name = de.self_type.type_name
        de.check_holder_names({"Variant", class_name})

        body = ["class Variant(enum.Enum):"]
        body.extend(
            f"    {v.name.as_upper_snake_case()} = {v.name.as_pascal_case()!r}" for v in de.variants
        )
        body.append("")
        for v in de.variants:
            if isinstance(v, ObjectVariant):
                fields = [
                    (py_ident(f.name.as_snake_case()), f.json_name, f.field_type.type_name)
                    for f in v.fields
                ]
                body.extend(self._record_class(v.name.as_pascal_case(), fields))
                body.append("")

        body.extend([
            "def __init__(self, variant, value):",
            "    self._variant = variant",
            "    self._value = value",
            "",
            "@property",
            "def variant(self):",
            "    return self._variant",
            "",
            "def __eq__(self, other):",
            f"    if not isinstance(other, {class_name}):",
            "        return NotImplemented",
            "    return (self._variant, self._value) == (other._variant, other._value)",
            "",
            "def __repr__(self):",
            f'    return f"{class_name}.{{self._variant.name}}({{self._value!r}})"',
            "",
            "def _expect(self, variant):",
            "    if self._variant is not variant:",
            '        raise _rt.InvalidVariantError(f"Invalid variant: {self._variant.name}")',
            "",
        ])
        for v in de.variants:
            body.extend(self._variant_members(class_name, v))
        body.extend(self._external_serializer(de))
        body.extend(self._external_deserializer(de))

        lines = [f"class {class_name}:", *indent(body)]
        return self._render(class_name, lines)

    def _variant_members(self, class_name: str, v: DataEnumVariant) -> list[str]:
        snake = v.name.as_snake_case()
        case = f"{class_name}.Variant.{v.name.as_upper_snake_case()}"
        if isinstance(v, UnitVariant):
            lines = [
                "@staticmethod",
                f"def of_{snake}():",
                f"    return {class_name}({case}, None)",
                "",
            ]
        elif isinstance(v, ObjectVariant):
            holder = f"{class_name}.{v.name.as_pascal_case()}"
            names = [py_ident(f.name.as_snake_case()) for f in v.fields]
            params = ", ".join(f"{n}: {f.field_type.type_name!r}" for n, f in zip(names, v.fields))
            lines = [
                "@staticmethod",
                f"def of_{snake}({params}):",
                f"    return {class_name}({case}, {holder}({', '.join(names)}))",
                "",
                f"def get_{snake}(self):",
                f"    self._expect({case})",
                "    return self._value",
                "",
            ]
        else:
            args = [f"arg{i}" for i in range(v.arity)]
            params = ", ".join(f"{a}: {t.type_name!r}" for a, t in zip(args, v.fields))
            lines = [
                "@staticmethod",
                f"def of_{snake}({params}):",
                f"    return {class_name}({case}, ({', '.join(args)},))",
                "",
            ]
            numbered = v.arity != 1
            for i in range(v.arity):
                getter = f"get_{snake}{i}" if numbered else f"get_{snake}"
                lines.extend([
                    f"def {getter}(self):",
                    f"    self._expect({case})",
                    f"    return self._value[{i}]",
                    "",
                ])
        lines.extend([
            f"def is_{snake}(self):",
            f"    return self._variant is {case}",
            "",
        ])
        return lines

    # ══════════════════════════════════════════════════════════════
    # External tagging codec
    # ══════════════════════════════════════════════════════════════

    def _external_serializer(self, de: DataEnum) -> list[str]:
        class_name = de.self_type.type_name
        lines = ["def to_json(self):"]
        for v in de.variants:
            case = f"{class_name}.Variant.{v.name.as_upper_snake_case()}"
            tag = repr(v.json_name)
            if isinstance(v, UnitVariant):
                payload = None
            elif isinstance(v, TupleVariant) and v.arity == 1:
                payload = "_rt.to_json(self._value[0])"
            else:
                payload = "_rt.to_json(self._value)"
            lines.append(f"    if self._variant is {case}:")
            if payload is None:
                lines.append(f"        return {tag}")
            else:
                lines.append(f"        return {{{tag}: {payload}}}")
        lines.extend([
            '    raise _rt.InvalidVariantError(f"Invalid variant: {self._variant.name}")',
            "",
        ])
        return lines

    def _external_deserializer(self, de: DataEnum) -> list[str]:
        class_name = de.self_type.type_name
        unit_cases = []
        object_cases = []
        for v in de.variants:
            case = f"cls.Variant.{v.name.as_upper_snake_case()}"
            tag = repr(v.json_name)
            if isinstance(v, UnitVariant):
                unit_cases.extend([
                    f"if data == {tag}:",
                    f"    return cls({case}, None)",
                ])
            elif isinstance(v, ObjectVariant):
                object_cases.extend([
                    f"if {tag} in data:",
                    f"    return cls({case}, _rt.from_json(data[{tag}], cls.{v.name.as_pascal_case()}, cls))",
                ])
            else:
                factory = f"cls.of_{v.name.as_snake_case()}"
                object_cases.extend([
                    f"if {tag} in data:",
                    f"    return cls({case}, _rt.parse_slots(cls, {tag}, data[{tag}], {factory}))",
                ])

        return [
            "@classmethod",
            "def from_json(cls, data):",
            "    if isinstance(data, str):",
            *indent(unit_cases or ["pass"], 2),
            "    elif isinstance(data, dict):",
            *indent(object_cases or ["pass"], 2),
            f'    raise _rt.DeserializationError("Cannot deserialize " + {class_name!r})',
        ]


def generate_python_code(ir: IntermediateRepresentation) -> list[GeneratedClass]:
    """Generate Python classes for every type collected in ``ir``"""
    return PythonGenerator(ir).generate()


def write_python(classes: list[GeneratedClass], package: str, directory) -> list[Path]:
    """Write one module per class plus an ``__init__.py`` importing them all"""
    package_dir = Path(directory) / package.replace(".", "/")
    written = []
    init_lines = ["# AUTO-GENERATED - DO NOT EDIT"]
    modules = {}
    for cls in classes:
        module = module_name(cls.name)
        if module in modules:
            raise GenerationError(
                f"Classes {modules[module]} and {cls.name} both map to the module {module}.py"
            )
        modules[module] = cls.name
    try:
        package_dir.mkdir(parents=True, exist_ok=True)
        for cls in classes:
            module = module_name(cls.name)
            path = package_dir / f"{module}.py"
            path.write_text(cls.code, encoding="utf-8")
            written.append(path)
            init_lines.append(f"from .{module} import {cls.name}")
        init_path = package_dir / "__init__.py"
        init_path.write_text("\n".join(init_lines) + "\n", encoding="utf-8")
        written.append(init_path)
    except OSError as exc:
        raise GenerationError(f"Failed to write Python sources to {package_dir}: {exc}") from exc
    return written
