"""Intermediate representation of collected host types"""

import enum
from dataclasses import dataclass, field
from typing import Union

from .errors import GenerationError
from .name import Name


@dataclass(frozen=True)
class Type:
    """Target type expression used where a type is referenced"""
    type_name: str

    def __str__(self) -> str:
        return self.type_name


@dataclass(frozen=True)
class CustomType:
    """Target identifier under which a type is defined"""
    type_name: str

    def __str__(self) -> str:
        return self.type_name


@dataclass
class Field:
    """Struct field"""
    name: Name
    json_name: str
    field_type: Type


@dataclass
class Struct:
    """Plain record, generated as a class"""
    name: Name
    self_type: CustomType
    fields: list[Field] = field(default_factory=list)


@dataclass
class EnumVariant:
    """Payload-less enum constant"""
    name: Name
    json_name: str


@dataclass
class Enum:
    """Plain enumeration"""
    name: Name
    self_type: CustomType
    variants: list[EnumVariant] = field(default_factory=list)


@dataclass(frozen=True)
class DataEnumObjectField:
    """Named payload field of an object variant"""
    name: Name
    json_name: str
    field_type: Type


@dataclass(frozen=True)
class UnitVariant:
    """Variant without payload, encoded as its bare tag"""
    name: Name
    json_name: str


@dataclass(frozen=True)
class ObjectVariant:
    """Variant with named fields, encoded as {"Tag": {...}}"""
    name: Name
    json_name: str
    fields: tuple[DataEnumObjectField, ...] = ()


@dataclass(frozen=True)
class TupleVariant:
    """Variant with positional slots; arity 1 is encoded as {"Tag": value}, otherwise {"Tag": [...]}"""
    name: Name
    json_name: str
    fields: tuple[Type, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.fields)


DataEnumVariant = Union[UnitVariant, ObjectVariant, TupleVariant]


class DataEnumStyle(enum.Enum):
    """How a data enum variant is tagged on the wire"""
    EXTERNAL = "external"


@dataclass
class DataEnum:
    """Tagged union"""
    name: Name
    self_type: CustomType
    style: DataEnumStyle = DataEnumStyle.EXTERNAL
    variants: list[DataEnumVariant] = field(default_factory=list)

    def check_holder_names(self, reserved: set[str]):
        """Reject object variants whose holder class would shadow a generated member"""
        for variant in self.variants:
            holder = variant.name.as_pascal_case()
            if isinstance(variant, ObjectVariant) and holder in reserved:
                raise GenerationError(
                    f"Object variant {holder} of {self.self_type} clashes with a generated class name"
                )


@dataclass
class GeneratedClass:
    """One generated source unit"""
    name: str
    code: str
