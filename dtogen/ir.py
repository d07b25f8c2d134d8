"""Intermediate representation and dependency collection"""

import dataclasses
import logging
import typing
from typing import Any, Union

from .errors import GenerationError
from .host import (
    CONTAINERS, Kind, classify, data_enum_variants, generic_mapping, json_name_of,
    resolve_hint, type_identity,
)
from .name import Name
from .type_mapper import TypeTarget
from .types import (
    DataEnum, DataEnumObjectField, Enum, EnumVariant, Field, ObjectVariant, Struct,
    TupleVariant, UnitVariant,
)

log = logging.getLogger(__name__)


class IntermediateRepresentation:
    """Types collected for one generation request and one target.

    Each distinct type identity is walked once: it is marked as seen before
    its fields or variants are visited, so recursive graphs terminate.
    """

    def __init__(self, target: TypeTarget):
        self.target = target
        self.structs: list[Struct] = []
        self.enums: list[Enum] = []
        self.data_enums: list[DataEnum] = []
        self._type_ids: set[tuple] = set()

    def add_struct(self, struct: Struct):
        self.structs.append(struct)

    def add_enum(self, enum_ir: Enum):
        self.enums.append(enum_ir)

    def add_data_enum(self, data_enum: DataEnum):
        self.data_enums.append(data_enum)

    def add_type_id(self, type_id: tuple):
        self._type_ids.add(type_id)

    def has_type_id(self, type_id: tuple) -> bool:
        return type_id in self._type_ids

    def defined_types(self) -> list[Union[Struct, Enum, DataEnum]]:
        """All collected entities; fails if two of them share a class name"""
        entities = [*self.structs, *self.enums, *self.data_enums]
        seen = {}
        for entity in entities:
            name = entity.self_type.type_name
            if name in seen:
                raise GenerationError(f"Two distinct types map to the class name {name}")
            seen[name] = entity
        return entities

    def add(self, tp: Any):
        """Register ``tp`` and, transitively, every type it depends on"""
        type_id = type_identity(tp)
        if self.has_type_id(type_id):
            return
        self.add_type_id(type_id)

        kind, base, args = classify(tp)
        if kind is Kind.PRIMITIVE:
            return
        if kind in CONTAINERS:
            for arg in args:
                self.add(arg)
            return

        log.debug("Collecting %s %s", kind.value, self.target.resolve_custom_type(tp))
        if kind is Kind.STRUCT:
            self.add_struct(self._collect_struct(tp))
        elif kind is Kind.ENUM:
            self.add_enum(self._collect_enum(base))
        else:
            self.add_data_enum(self._collect_data_enum(tp))

    def add_all(self, *types: Any):
        for tp in types:
            self.add(tp)

    def _dependency(self, hint: Any, owner: type, mapping: dict) -> Any:
        resolved = resolve_hint(hint, owner, mapping)
        self.add(resolved)
        return resolved

    def _collect_struct(self, tp: Any) -> Struct:
        cls, mapping = generic_mapping(tp)
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as exc:
            raise GenerationError(f"Cannot read the fields of {cls.__qualname__}: {exc}") from exc

        struct = Struct(Name.from_pascal_case(cls.__name__), self.target.resolve_custom_type(tp))
        for f in dataclasses.fields(cls):
            hint = self._dependency(hints.get(f.name, f.type), cls, mapping)
            struct.fields.append(Field(
                name=Name.from_snake_case(f.name),
                json_name=json_name_of(hint) or f.name,
                field_type=self.target.resolve_type(hint),
            ))
        return struct

    def _collect_enum(self, cls: type) -> Enum:
        enum_ir = Enum(Name.from_pascal_case(cls.__name__), self.target.resolve_custom_type(cls))
        for member in cls:
            if member.name.isupper():
                name = Name.from_upper_snake_case(member.name)
            else:
                name = Name.from_pascal_case(member.name)
            json_name = member.value if isinstance(member.value, str) else member.name
            enum_ir.variants.append(EnumVariant(name, json_name))
        return enum_ir

    def _collect_data_enum(self, tp: Any) -> DataEnum:
        cls, mapping = generic_mapping(tp)
        data_enum = DataEnum(Name.from_pascal_case(cls.__name__), self.target.resolve_custom_type(tp))
        for attr, decl in data_enum_variants(cls):
            name = Name.from_pascal_case(attr)
            json_name = decl.rename or attr
            if decl.shape == "unit":
                variant = UnitVariant(name, json_name)
            elif decl.shape == "tuple":
                slots = [self._dependency(slot, cls, mapping) for slot in decl.slots]
                variant = TupleVariant(name, json_name, tuple(self.target.resolve_type(s) for s in slots))
            else:
                fields = []
                for field_name, field_hint in decl.fields:
                    hint = self._dependency(field_hint, cls, mapping)
                    fields.append(DataEnumObjectField(
                        name=Name.from_snake_case(field_name),
                        json_name=json_name_of(hint) or field_name,
                        field_type=self.target.resolve_type(hint),
                    ))
                variant = ObjectVariant(name, json_name, tuple(fields))
            data_enum.variants.append(variant)
        return data_enum
