"""Tests for pathrule.__init__ — lazy imports cover all public names."""

import pytest

import pathrule


@pytest.mark.parametrize("name", pathrule.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(pathrule, name)
    assert obj is not None, f"pathrule.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        pathrule.__getattr__("ThisDoesNotExist")


def test_version() -> None:
    assert pathrule.__version__ == "0.1.0"
