import asyncio

import pytest

from diforge import DIForgeCyclicDependencyError
from diforge.resolution_stack import (
    build_token,
    get_resolution_stack,
    resolving,
    resolving_binding,
)


class Builder:
    def __call__(self) -> str:
        return "built"

    def build(self) -> str:
        return "built"


def frame_names() -> list[str]:
    return [frame.name for frame in get_resolution_stack()]


def test_resolving_pushes_frames() -> None:
    with resolving("App\\Widget"), resolving("App\\Gear"):
        assert frame_names() == ["App\\Widget", "App\\Gear"]

    assert get_resolution_stack() == []


def test_reentering_a_class_raises() -> None:
    with resolving("app.Widget"), pytest.raises(DIForgeCyclicDependencyError) as exc_info:
        with resolving("\\App\\Widget"):
            pass

    assert exc_info.value.chain == ["app.Widget", "\\App\\Widget"]


def test_stack_unwinds_on_errors() -> None:
    with pytest.raises(RuntimeError), resolving("app.widget"):
        raise RuntimeError

    assert get_resolution_stack() == []


def test_reentering_a_binding_raises() -> None:
    with resolving_binding("db"), pytest.raises(DIForgeCyclicDependencyError) as exc_info:
        with resolving_binding("db"):
            pass

    assert exc_info.value.chain == ["db", "db"]


def test_bindings_and_builds_are_tracked_separately() -> None:
    with resolving_binding("app.widget"), resolving("app.widget"):
        assert frame_names() == ["app.widget", "app.widget"]


def test_non_string_binding_keys_are_accepted() -> None:
    with resolving_binding(("cache", 1)):
        assert frame_names() == ["('cache', 1)"]


def test_callable_instances_are_keyed_by_identity() -> None:
    first = Builder()
    second = Builder()

    assert build_token(first) != build_token(second)
    assert build_token(first) == build_token(first)

    with resolving(first), resolving(second):
        assert len(get_resolution_stack()) == 2


def test_bound_methods_are_keyed_by_instance() -> None:
    first = Builder()
    second = Builder()

    assert build_token(first.build) == build_token(first.build)
    assert build_token(first.build) != build_token(second.build)


def test_classes_and_names_share_a_token() -> None:
    assert build_token(Builder) == build_token(f"{Builder.__module__}.{Builder.__qualname__}".upper())


def test_async_tasks_get_isolated_stacks() -> None:
    seen: dict[str, list[str]] = {}

    async def resolve(name: str) -> None:
        with resolving(name):
            await asyncio.sleep(0)
            seen[name] = frame_names()

    async def main() -> None:
        await asyncio.gather(resolve("app.first"), resolve("app.second"))

    asyncio.run(main())

    assert seen == {"app.first": ["app.first"], "app.second": ["app.second"]}
