"""Command line driver: collect host types and write generated classes"""

import argparse
import importlib
import sys
import time
from pathlib import Path

from .codegen import WRITERS, generate
from .errors import GenerationError
from .type_mapper import TypeTarget


def load_type(reference: str):
    """Load ``package.module:Name`` (dotted attribute paths allowed after the colon)"""
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise GenerationError(f"Expected module:Type, got {reference!r}")
    try:
        obj = importlib.import_module(module_name)
    except ImportError as exc:
        raise GenerationError(f"Cannot import {module_name}: {exc}") from exc
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise GenerationError(f"{module_name} has no attribute {attr_path}") from None
    return obj


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate DTO classes from Python type declarations")
    parser.add_argument("types", nargs="+", help="Root types as module:Type")
    parser.add_argument("--target", "-t", choices=[t.value for t in TypeTarget], default="java",
                        help="Target language")
    parser.add_argument("--package", "-p", default="", help="Target package (default: dtos)")
    parser.add_argument("--output-dir", "-o", default="generated", help="Output directory")
    parser.add_argument("--path", action="append", default=[],
                        help="Extra directory to put on sys.path before importing types")
    return parser


def main(argv=None) -> int:
    start_time = time.perf_counter()
    args = build_parser().parse_args(argv)

    for path in args.path:
        sys.path.insert(0, str(Path(path).resolve()))

    target = TypeTarget(args.target)
    package = args.package or "dtos"
    try:
        types = [load_type(ref) for ref in args.types]
        classes = generate(target, *types)
        written = WRITERS[target](classes, package, args.output_dir)
    except GenerationError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1

    for path in written:
        print(f"Generated: {path}")

    elapsed = time.perf_counter() - start_time
    print(f"Generation completed in {elapsed*1000:.2f} ms")
    return 0
