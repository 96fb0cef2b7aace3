"""Autowire ``pydantic_settings.BaseSettings`` subclasses as shared bindings.

Settings read the environment when they are constructed. The container binds
an unbound settings class shared the first time it is requested, so the
environment is read once per container.
"""

from __future__ import annotations

import importlib
from typing import Any

from diforge.resolvers import Deferred


def _load_settings_base() -> type[Any] | None:
    try:
        module = importlib.import_module("pydantic_settings")
    except ImportError:
        return None
    base = getattr(module, "BaseSettings", None)
    return base if isinstance(base, type) else None


SETTINGS_BASE: type[Any] | None = _load_settings_base()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``candidate`` is a class deriving from ``BaseSettings``.

    Always ``False`` when pydantic-settings is not installed.
    """
    return (
        SETTINGS_BASE is not None
        and isinstance(candidate, type)
        and issubclass(candidate, SETTINGS_BASE)
    )


def settings_factory(settings_class: type[Any]) -> Deferred:
    """Return the resolver the container binds ``settings_class`` to."""
    return Deferred(lambda _container: settings_class())


__all__ = [
    "SETTINGS_BASE",
    "is_pydantic_settings_subclass",
    "settings_factory",
]
