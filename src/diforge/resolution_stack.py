"""Track what is being resolved in the current context and reject re-entry.

Two kinds of work are tracked. ``resolving`` marks a class or callable that
``Container.new_instance`` is building. ``resolving_binding`` marks a binding
whose factory ``Container.get`` is running. Each kind has its own keys, so
a binding whose factory builds the class it is bound to is not a cycle.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Generator, Hashable
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from typing import Any, NamedTuple

from diforge.build_plan import get_class_name, is_closure, normalize_class_name
from diforge.exceptions import DIForgeCyclicDependencyError


class ResolutionFrame(NamedTuple):
    """One entry of the resolution stack."""

    token: Hashable
    name: str


# (owner task id, frames); a task that did not create the stack works on a copy
_frames: ContextVar[tuple[int | None, list[ResolutionFrame]] | None] = ContextVar(
    "diforge_resolution_frames",
    default=None,
)


def _current_task_id() -> int | None:
    try:
        task = asyncio.current_task()
    except RuntimeError:
        return None
    return None if task is None else id(task)


def get_resolution_stack() -> list[ResolutionFrame]:
    """Return the frames of the current context, outermost first.

    Concurrent async tasks share the frames pushed before they started but
    never see each other's later pushes.
    """
    task_id = _current_task_id()
    stored = _frames.get()

    if stored is not None:
        owner, frames = stored
        if task_id is None or owner == task_id:
            return frames
        frames = list(frames)
    else:
        frames = []

    _frames.set((task_id, frames))
    return frames


def build_token(target: Any) -> Hashable:
    """Return the key that identifies ``target`` while it is being built.

    Classes and names compare by normalized class name. Closures and callable
    instances compare by identity, since two of them sharing a type are still
    different builders. Bound methods compare by their instance and function.
    """
    if isinstance(target, type | str):
        return normalize_class_name(target)
    if inspect.ismethod(target):
        return ("method", id(target.__self__), normalize_class_name(target.__func__))
    if is_closure(target) or not inspect.isroutine(target):
        return ("object", id(target))
    return normalize_class_name(target)


@contextmanager
def _guard(token: Hashable, name: str) -> Generator[None, None, None]:
    frames = get_resolution_stack()
    if any(frame.token == token for frame in frames):
        raise DIForgeCyclicDependencyError(name, [frame.name for frame in frames])
    frames.append(ResolutionFrame(token, name))
    try:
        yield
    finally:
        frames.pop()


def resolving(target: Any) -> AbstractContextManager[None]:
    """Mark ``target`` (a class or callable) as being built for the duration of the block.

    Raises:
        DIForgeCyclicDependencyError: If ``target`` is already being built
            further up the current stack.

    """
    return _guard(("build", build_token(target)), get_class_name(target))


def resolving_binding(key: Hashable) -> AbstractContextManager[None]:
    """Mark the binding ``key`` as running its factory for the duration of the block.

    Raises:
        DIForgeCyclicDependencyError: If the factory of ``key`` is already
            running further up the current stack.

    """
    name = get_class_name(key) if isinstance(key, type | str) else repr(key)
    return _guard(("binding", key), name)
