"""Type mapping from host types to target type expressions"""

import enum
from typing import Any

from .host import Kind, classify, i8, i16, i32, i64, f32, f64
from .types import CustomType, Type


class TypeMapper:
    """Maps host types to Java and Python type expressions and class names"""

    # Boxed Java types, so that absent JSON fields map to null
    JAVA_TYPES = {
        bool: 'Boolean',
        i8: 'Byte',
        i16: 'Short',
        i32: 'Integer',
        i64: 'Long',
        int: 'Long',
        f32: 'Float',
        f64: 'Double',
        float: 'Double',
        str: 'String',
    }

    PYTHON_TYPES = {
        bool: 'bool',
        i8: 'int',
        i16: 'int',
        i32: 'int',
        i64: 'int',
        int: 'int',
        f32: 'float',
        f64: 'float',
        float: 'float',
        str: 'str',
    }

    # Class name fragments for generic instantiations, unique per host primitive
    PYTHON_FRAGMENTS = {
        bool: 'Bool',
        i8: 'I8',
        i16: 'I16',
        i32: 'I32',
        i64: 'I64',
        int: 'Int',
        f32: 'F32',
        f64: 'F64',
        float: 'Float',
        str: 'Str',
    }

    @classmethod
    def to_java(cls, tp: Any) -> str:
        """Convert host type to the Java type used for a field"""
        kind, base, args = classify(tp)
        if kind is Kind.PRIMITIVE:
            return cls.JAVA_TYPES[base]
        if kind is Kind.LIST:
            return f'java.util.List<{cls.to_java(args[0])}>'
        if kind is Kind.MAP:
            return f'java.util.Map<{cls.to_java(args[0])}, {cls.to_java(args[1])}>'
        if kind in (Kind.OPTIONAL, Kind.BOX):
            return cls.to_java(args[0])
        return cls.java_class_name(tp)

    @classmethod
    def java_class_name(cls, tp: Any) -> str:
        """Name of the Java class generated for a struct, enum or data enum"""
        kind, base, args = classify(tp)
        return base.__name__ + ''.join(cls._fragment(a, cls.JAVA_TYPES, cls.java_class_name) for a in args)

    @classmethod
    def to_python(cls, tp: Any) -> str:
        """Convert host type to the Python annotation used for a field"""
        kind, base, args = classify(tp)
        if kind is Kind.PRIMITIVE:
            return cls.PYTHON_TYPES[base]
        if kind is Kind.LIST:
            return f'list[{cls.to_python(args[0])}]'
        if kind is Kind.MAP:
            return f'dict[{cls.to_python(args[0])}, {cls.to_python(args[1])}]'
        if kind in (Kind.OPTIONAL, Kind.BOX):
            return cls.to_python(args[0])
        return cls.python_class_name(tp)

    @classmethod
    def python_class_name(cls, tp: Any) -> str:
        """Name of the Python class generated for a struct, enum or data enum"""
        kind, base, args = classify(tp)
        return base.__name__ + ''.join(cls._fragment(a, cls.PYTHON_FRAGMENTS, cls.python_class_name) for a in args)

    @classmethod
    def _fragment(cls, tp: Any, primitives: dict, class_name) -> str:
        kind, base, args = classify(tp)
        if kind is Kind.PRIMITIVE:
            return primitives[base]
        if kind is Kind.LIST:
            return 'List' + cls._fragment(args[0], primitives, class_name)
        if kind is Kind.MAP:
            return ('Map' + cls._fragment(args[0], primitives, class_name)
                    + cls._fragment(args[1], primitives, class_name))
        if kind in (Kind.OPTIONAL, Kind.BOX):
            return cls._fragment(args[0], primitives, class_name)
        return class_name(tp)


class TypeTarget(enum.Enum):
    """Target language an IR is built for; type resolution depends on it"""
    JAVA = 'java'
    PYTHON = 'python'

    def resolve_type(self, tp: Any) -> Type:
        if self is TypeTarget.JAVA:
            return Type(TypeMapper.to_java(tp))
        return Type(TypeMapper.to_python(tp))

    def resolve_custom_type(self, tp: Any) -> CustomType:
        if self is TypeTarget.JAVA:
            return CustomType(TypeMapper.java_class_name(tp))
        return CustomType(TypeMapper.python_class_name(tp))
