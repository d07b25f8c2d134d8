"""Generation entry points: one IR per request, one generator per target"""

from typing import Any

from .ir import IntermediateRepresentation
from .java_generator import generate_java_code, write_java
from .python_generator import generate_python_code, write_python
from .type_mapper import TypeTarget
from .types import GeneratedClass

GENERATORS = {
    TypeTarget.JAVA: generate_java_code,
    TypeTarget.PYTHON: generate_python_code,
}

WRITERS = {
    TypeTarget.JAVA: write_java,
    TypeTarget.PYTHON: write_python,
}


def build_ir(target: TypeTarget, *types: Any) -> IntermediateRepresentation:
    """Collect ``types`` and all of their dependencies for ``target``"""
    ir = IntermediateRepresentation(target)
    ir.add_all(*types)
    return ir


def generate(target: TypeTarget, *types: Any) -> list[GeneratedClass]:
    """Generate classes for ``types`` and their dependencies.

    Example::

        classes = generate(TypeTarget.JAVA, Order, Pair[int, str])
        write_java(classes, "com.example", "src/main/java")
    """
    return GENERATORS[target](build_ir(target, *types))
