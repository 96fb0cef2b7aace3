"""Shared pytest fixtures for diforge tests."""

import pytest

from diforge.container import Container
from diforge.resolution_stack import get_resolution_stack


@pytest.fixture()
def container() -> Container:
    """Default container with autowiring enabled."""
    return Container()


@pytest.fixture()
def strict_container() -> Container:
    """Container with autowire=False."""
    return Container(autowire=False)


@pytest.fixture(autouse=True)
def _clean_resolution_stack() -> None:
    """Every test starts without classes marked as in progress."""
    get_resolution_stack().clear()
