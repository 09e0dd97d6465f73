"""Checks on the flat top-level module layout."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
MODULES = sorted(path.stem for path in (ROOT / "bookstore_service").glob("*.py"))


@pytest.mark.skipif(sys.version_info < (3, 10), reason="needs sys.stdlib_module_names")
def test_no_module_shadows_the_standard_library():
    assert MODULES
    assert set(MODULES).isdisjoint(sys.stdlib_module_names)


@pytest.mark.skipif(sys.version_info < (3, 11), reason="needs tomllib")
def test_every_module_is_installed():
    import tomllib

    with open(ROOT / "pyproject.toml", "rb") as f:
        pyproject = tomllib.load(f)

    assert sorted(pyproject["tool"]["setuptools"]["py-modules"]) == MODULES
