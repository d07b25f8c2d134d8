#!/usr/bin/env python3
"""
DTO Code Generator

Collects Python host types (dataclasses, enums and @data_enum tagged unions)
and generates:
  1. Java classes with Jackson annotations and codecs
  2. Python classes backed by dtogen.runtime

Usage:
    python generate_dtos.py myapp.models:Order --output-dir generated/
    python generate_dtos.py myapp.models:Order --target python --package myapp_dtos
"""

import sys
from pathlib import Path

# Add parent directory to path so dtogen package can be found
sys.path.insert(0, str(Path(__file__).parent.parent))

from dtogen.cli import main


if __name__ == "__main__":
    sys.exit(main())
