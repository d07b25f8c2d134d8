import importlib
import uuid

import pytest

from dtogen import write_python


@pytest.fixture
def load_package(tmp_path, monkeypatch):
    """Write generated Python classes to a fresh package and import it"""
    monkeypatch.syspath_prepend(str(tmp_path))

    def load(classes):
        package = f"generated_{uuid.uuid4().hex[:12]}"
        write_python(classes, package, tmp_path)
        importlib.invalidate_caches()
        return importlib.import_module(package)

    return load
