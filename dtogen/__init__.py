"""
DTO Code Generator Package

Collects Python host types into an intermediate representation and generates:
  1. Java classes with Jackson annotations (structs, enums, tagged unions)
  2. Python classes with a JSON codec (dtogen.runtime)

Tagged unions use the externally tagged JSON encoding:
  unit      -> "Tag"
  object    -> {"Tag": {...}}
  tuple(1)  -> {"Tag": value}
  tuple(n)  -> {"Tag": [v0, v1, ...]}
"""

from .errors import GenerationError
from .name import Name
from .host import Box, Variant, data_enum, rename, i8, i16, i32, i64, f32, f64
from .types import (
    Type, CustomType, Field, Struct, Enum, EnumVariant, DataEnum, DataEnumStyle,
    DataEnumObjectField, UnitVariant, ObjectVariant, TupleVariant, GeneratedClass,
)
from .type_mapper import TypeMapper, TypeTarget
from .ir import IntermediateRepresentation
from .java_generator import JavaGenerator, generate_java_code, write_java
from .python_generator import PythonGenerator, generate_python_code, write_python
from .codegen import build_ir, generate

__all__ = [
    'GenerationError', 'Name',
    'Box', 'Variant', 'data_enum', 'rename', 'i8', 'i16', 'i32', 'i64', 'f32', 'f64',
    'Type', 'CustomType', 'Field', 'Struct', 'Enum', 'EnumVariant', 'DataEnum', 'DataEnumStyle',
    'DataEnumObjectField', 'UnitVariant', 'ObjectVariant', 'TupleVariant', 'GeneratedClass',
    'TypeMapper', 'TypeTarget', 'IntermediateRepresentation',
    'JavaGenerator', 'generate_java_code', 'write_java',
    'PythonGenerator', 'generate_python_code', 'write_python',
    'build_ir', 'generate',
]
