"""JSON codec used by classes generated for the Python target

Generated structs and object-variant holders declare ``__json_fields__`` as
``(attribute, wire name)`` pairs; generated data enums and enums carry their
own ``to_json``/``from_json``.  Field and slot types come from the string
annotations of the generated ``__init__`` and ``of_*`` factories, resolved
with ``typing.get_type_hints`` against the classes of the generated module
and its package, so generated modules never import each other.
"""

import enum
import json
import sys
import types
import typing
from typing import Any, Union, get_args, get_origin


class DeserializationError(ValueError):
    """Input JSON does not match the shape of the requested type"""


class InvalidVariantError(RuntimeError):
    """A data enum payload was accessed through another variant's accessor"""


_hint_cache: dict = {}


def _namespace(owner: type) -> dict:
    """Classes visible from ``owner``'s module: the package exports, then the module's own"""
    module = sys.modules.get(owner.__module__)
    namespace = {}
    if module is None:
        return namespace
    package = sys.modules.get(module.__package__ or "")
    sources = [module] if package is None or package is module else [package, module]
    for source in sources:
        namespace.update((name, obj) for name, obj in vars(source).items() if isinstance(obj, type))
    return namespace


def type_hints(func: Any, owner: type) -> dict:
    """Resolved parameter hints of a generated function, cached per function"""
    hints = _hint_cache.get(func)
    if hints is None:
        try:
            hints = typing.get_type_hints(func, globalns=_namespace(owner))
        except Exception as exc:
            raise DeserializationError(f"Cannot resolve the type hints of {owner.__name__}: {exc}") from exc
        hints.pop("return", None)
        _hint_cache[func] = hints
    return hints


def _key_to_json(key: Any) -> str:
    if isinstance(key, enum.Enum):
        return key.value
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def _key_from_json(key: str, hint: Any, owner: type) -> Any:
    if hint is str:
        return key
    if hint is bool:
        return key == "true"
    try:
        if hint in (int, float):
            return hint(key)
    except ValueError as exc:
        raise DeserializationError(f"Invalid map key {key!r} for {owner.__name__}") from exc
    return from_json(key, hint, owner)


def to_json(value: Any) -> Any:
    """Convert a value to JSON-compatible builtins"""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {_key_to_json(k): to_json(v) for k, v in value.items()}
    if hasattr(value, "to_json"):
        return value.to_json()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def from_json(data: Any, hint: Any, owner: type) -> Any:
    """Decode JSON builtins according to a type hint; null decodes to None"""
    if data is None:
        return None

    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        inner = [a for a in get_args(hint) if a is not type(None)]
        if len(inner) != 1:
            raise DeserializationError(f"Unsupported type hint {hint!r} for {owner.__name__}")
        return from_json(data, inner[0], owner)
    if origin is list:
        if not isinstance(data, list):
            raise DeserializationError(f"Cannot deserialize {hint} for {owner.__name__}: expected array")
        (item,) = get_args(hint)
        return [from_json(v, item, owner) for v in data]
    if origin is dict:
        if not isinstance(data, dict):
            raise DeserializationError(f"Cannot deserialize {hint} for {owner.__name__}: expected object")
        key_hint, value_hint = get_args(hint)
        return {_key_from_json(k, key_hint, owner): from_json(v, value_hint, owner) for k, v in data.items()}

    if hint is bool:
        if isinstance(data, bool):
            return data
    elif hint is int:
        if isinstance(data, int) and not isinstance(data, bool):
            return data
    elif hint is float:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return float(data)
    elif hint is str:
        if isinstance(data, str):
            return data
    elif isinstance(hint, type) and issubclass(hint, enum.Enum):
        try:
            return hint(data)
        except ValueError as exc:
            raise DeserializationError(f"Cannot deserialize {hint.__name__}: unknown value {data!r}") from exc
    elif hasattr(hint, "from_json"):
        return hint.from_json(data)
    else:
        raise DeserializationError(f"Unsupported type hint {hint!r} for {owner.__name__}")
    raise DeserializationError(f"Cannot deserialize {hint.__name__} from {data!r}")


def encode_fields(obj: Any) -> dict:
    """Encode a generated record as a JSON object keyed by wire names"""
    return {wire: to_json(getattr(obj, attr)) for attr, wire in type(obj).__json_fields__}


def decode_fields(cls: type, data: Any) -> Any:
    """Decode a JSON object into ``cls``; missing fields become None"""
    if not isinstance(data, dict):
        raise DeserializationError(f"Cannot deserialize {cls.__name__}: expected object")
    hints = type_hints(cls.__init__, cls)
    kwargs = {attr: from_json(data.get(wire), hints[attr], cls) for attr, wire in cls.__json_fields__}
    return cls(**kwargs)


def parse_slots(cls: type, key: str, value: Any, factory: Any) -> tuple:
    """Decode a tuple variant payload: a single value for arity 1, else a fixed-size array.

    Slot types are the parameter hints of the variant's ``of_*`` factory.
    """
    hints = list(type_hints(factory, cls).values())
    if len(hints) == 1:
        return (from_json(value, hints[0], cls),)
    if not isinstance(value, list) or len(value) != len(hints):
        raise DeserializationError(
            f"Cannot deserialize {cls.__name__}: expected array of size {len(hints)} for field {key}"
        )
    return tuple(from_json(v, h, cls) for v, h in zip(value, hints))


def dumps(value: Any) -> str:
    """Serialize a generated value to compact JSON text"""
    return json.dumps(to_json(value), separators=(",", ":"))


def loads(text: str, cls: type) -> Any:
    """Parse JSON text into an instance of the generated class ``cls``"""
    return from_json(json.loads(text), cls, cls)
