"""Host-side type declarations and typing introspection

Structs are dataclasses, plain enums are ``enum.Enum`` subclasses and
tagged unions are classes decorated with :func:`data_enum`.  Everything the
collector and the type mapper need to know about a host type goes through
:func:`classify`, :func:`resolve_hint` and :func:`type_identity`.
"""

import dataclasses
import enum
import sys
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, ForwardRef, Generic, NewType, Optional, TypeVar, Union, get_args, get_origin

from .errors import GenerationError

i8 = NewType("i8", int)
i16 = NewType("i16", int)
i32 = NewType("i32", int)
i64 = NewType("i64", int)
f32 = NewType("f32", float)
f64 = NewType("f64", float)

PRIMITIVES = (bool, int, float, str, i8, i16, i32, i64, f32, f64)

T = TypeVar("T")


class Box(Generic[T]):
    """Indirection marker for recursive declarations, transparent to the IR"""


@dataclass(frozen=True)
class Rename:
    """``Annotated`` metadata overriding a wire tag"""
    json_name: str


def rename(json_name: str) -> Rename:
    """Wire tag override, used as ``Annotated[T, rename("tag")]``"""
    return Rename(json_name)


class Kind(enum.Enum):
    PRIMITIVE = "primitive"
    LIST = "list"
    MAP = "map"
    OPTIONAL = "optional"
    BOX = "box"
    STRUCT = "struct"
    ENUM = "enum"
    DATA_ENUM = "data_enum"


CONTAINERS = (Kind.LIST, Kind.MAP, Kind.OPTIONAL, Kind.BOX)


# ══════════════════════════════════════════════════════════════
# Data enum declarations
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VariantDecl:
    """Declared shape of one data enum variant"""
    shape: str  # unit | tuple | object
    slots: tuple = ()
    fields: tuple = ()
    rename: Optional[str] = None


class Variant:
    """Factories used as class attributes of a ``@data_enum`` class"""

    @staticmethod
    def unit(rename: Optional[str] = None) -> VariantDecl:
        """Variant without payload"""
        return VariantDecl("unit", rename=rename)

    @staticmethod
    def tuple(*slots: Any, rename: Optional[str] = None) -> VariantDecl:
        """Variant with positional slots, in declaration order"""
        if not slots:
            raise GenerationError("A tuple variant needs at least one slot")
        return VariantDecl("tuple", slots=slots, rename=rename)

    @staticmethod
    def object(rename: Optional[str] = None, **fields: Any) -> VariantDecl:
        """Variant with named fields, in keyword order"""
        return VariantDecl("object", fields=tuple(fields.items()), rename=rename)


def data_enum(cls):
    """Mark ``cls`` as a tagged union whose variants are its VariantDecl attributes."""
    variants = tuple(
        (attr, decl) for attr, decl in vars(cls).items() if isinstance(decl, VariantDecl)
    )
    if not variants:
        raise GenerationError(f"Data enum {cls.__qualname__} declares no variants")
    cls.__data_enum_variants__ = variants
    return cls


def is_data_enum(cls) -> bool:
    """True for classes decorated with :func:`data_enum` themselves, not their subclasses"""
    return isinstance(cls, type) and "__data_enum_variants__" in vars(cls)


def data_enum_variants(cls) -> tuple:
    return cls.__data_enum_variants__


# ══════════════════════════════════════════════════════════════
# Introspection
# ══════════════════════════════════════════════════════════════

def strip_annotated(tp: Any) -> Any:
    """Drop ``Annotated`` wrappers, keeping the underlying type"""
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def json_name_of(tp: Any) -> Optional[str]:
    """Return the ``rename(...)`` tag attached through ``Annotated``, if any"""
    if get_origin(tp) is not Annotated:
        return None
    for meta in tp.__metadata__:
        if isinstance(meta, Rename):
            return meta.json_name
    return json_name_of(get_args(tp)[0])


def classify(tp: Any) -> tuple[Kind, Any, tuple]:
    """Return ``(kind, base, args)`` for a fully resolved host type.

    ``base`` is the primitive itself, the container origin or the declaring
    class; ``args`` are the container element types or generic arguments.
    """
    tp = strip_annotated(tp)
    if isinstance(tp, TypeVar):
        raise GenerationError(f"Unbound type variable: {tp!r}")
    if isinstance(tp, (str, ForwardRef)):
        raise GenerationError(f"Unresolved forward reference: {tp!r}")
    if tp in PRIMITIVES:
        return Kind.PRIMITIVE, tp, ()

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is list:
        return Kind.LIST, list, args
    if origin is dict:
        return Kind.MAP, dict, args
    if origin is Union or origin is types.UnionType:
        inner = tuple(a for a in args if a is not type(None))
        if len(inner) != 1 or len(args) != 2:
            raise GenerationError(f"Only Optional unions are supported, got {tp!r}")
        return Kind.OPTIONAL, Optional, inner
    if origin is Box:
        return Kind.BOX, Box, args

    cls = origin if origin is not None else tp
    if not isinstance(cls, type):
        raise GenerationError(f"Unsupported type: {tp!r}")
    if issubclass(cls, enum.Enum):
        return Kind.ENUM, cls, ()
    if is_data_enum(cls):
        return Kind.DATA_ENUM, cls, args
    if dataclasses.is_dataclass(cls):
        return Kind.STRUCT, cls, args
    raise GenerationError(f"Unsupported type: {tp!r}")


def _qualified(obj: Any) -> str:
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or repr(obj)
    return f"{getattr(obj, '__module__', '')}.{name}"


def type_identity(tp: Any) -> tuple:
    """Structural identity: declaring name plus the identities of the arguments"""
    kind, base, args = classify(tp)
    return (_qualified(base), tuple(type_identity(a) for a in args))


def _evaluate(expr: str, owner: type) -> Any:
    """Resolve a string annotation against ``owner``'s module via ``typing.get_type_hints``"""
    module = sys.modules.get(owner.__module__)
    namespace = dict(vars(module)) if module is not None else {}
    namespace.setdefault(owner.__name__, owner)

    def annotated():
        pass

    annotated.__annotations__ = {"hint": expr}
    try:
        return typing.get_type_hints(annotated, globalns=namespace, include_extras=True)["hint"]
    except Exception as exc:
        raise GenerationError(
            f"Cannot resolve {expr!r} in {owner.__qualname__}: {exc}"
        ) from exc


def resolve_hint(tp: Any, owner: type, mapping: dict) -> Any:
    """Evaluate forward references and substitute type variables in ``tp``"""
    if isinstance(tp, str):
        return resolve_hint(_evaluate(tp, owner), owner, mapping)
    if isinstance(tp, ForwardRef):
        return resolve_hint(_evaluate(tp.__forward_arg__, owner), owner, mapping)
    if isinstance(tp, TypeVar):
        if tp not in mapping:
            raise GenerationError(f"Unbound type variable {tp!r} in {owner.__qualname__}")
        return mapping[tp]

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is None or not args:
        return tp
    if origin is Annotated:
        return Annotated[(resolve_hint(args[0], owner, mapping),) + tuple(tp.__metadata__)]

    new_args = tuple(resolve_hint(a, owner, mapping) for a in args)
    if origin is Union or origin is types.UnionType:
        return Union[new_args]
    return origin[new_args if len(new_args) > 1 else new_args[0]]


def generic_mapping(tp: Any) -> tuple[type, dict]:
    """Return the declaring class of ``tp`` and its type-variable bindings"""
    tp = strip_annotated(tp)
    origin = get_origin(tp)
    cls = origin if origin is not None else tp
    params = getattr(cls, "__parameters__", ())
    args = get_args(tp)
    if len(params) != len(args):
        raise GenerationError(
            f"{cls.__qualname__} expects {len(params)} type argument(s), got {len(args)}"
        )
    return cls, dict(zip(params, args))
