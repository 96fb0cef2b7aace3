from typing import Any

import pytest

from diforge import (
    BuildPlan,
    Container,
    DIForgeInvalidReferenceError,
    DIForgeUnsupportedOperationError,
    Operation,
    get_class_name,
    is_same_class,
    lazy,
)
from diforge.build_plan import is_closure, normalize_class_name


class Widget:
    def __init__(self, name: str, size: int = 1) -> None:
        self.name = name
        self.size = size


class Settings:
    def __init__(self) -> None:
        self.prefix = "cfg"


def module_level_factory() -> str:
    return "called"


WIDGET_NAME = f"{Widget.__module__}.{Widget.__qualname__}"


class TestClassIdentity:
    def test_class_name_of_class_and_instance(self) -> None:
        assert get_class_name(Widget) == WIDGET_NAME
        assert get_class_name(Widget("gear")) == WIDGET_NAME

    def test_strings_are_returned_verbatim(self) -> None:
        assert get_class_name("App\\Widget") == "App\\Widget"

    def test_build_plan_uses_its_class_name(self, container: Container) -> None:
        assert get_class_name(container.when_creating(Widget)) == WIDGET_NAME

    @pytest.mark.parametrize("value", [None, 42, 1.5, True, b"raw", [Widget], {"a": 1}])
    def test_invalid_references_are_rejected(self, value: Any) -> None:
        with pytest.raises(DIForgeInvalidReferenceError, match="should be object or class name"):
            get_class_name(value)

    def test_invalid_reference_is_a_type_error(self) -> None:
        with pytest.raises(TypeError):
            is_same_class(None, Widget)

    def test_same_class_ignores_case_and_separators(self) -> None:
        assert is_same_class("\\App\\Widget", "app.widget")
        assert is_same_class("App.Widget.", "\\APP\\WIDGET")
        assert not is_same_class("App\\Widget", "App\\Gadget")

    def test_same_class_accepts_mixed_references(self) -> None:
        assert is_same_class(Widget, WIDGET_NAME)
        assert is_same_class(Widget("gear"), Widget)
        assert is_same_class(WIDGET_NAME.upper(), Widget)
        assert not is_same_class(Widget, Settings)

    def test_closures_only_match_themselves(self) -> None:
        first = lambda: 1  # noqa: E731
        second = lambda: 1  # noqa: E731

        assert is_same_class(first, first)
        assert not is_same_class(first, second)

    def test_closures_never_match_their_name_token(self) -> None:
        first = lambda: 1  # noqa: E731

        assert not is_same_class(first, get_class_name(first))
        assert not is_same_class(get_class_name(first), first)
        assert is_same_class(BuildPlan(first), first)

    def test_normalize_class_name(self) -> None:
        assert normalize_class_name("\\Foo\\Bar\\") == "foo.bar"

    def test_is_closure(self) -> None:
        def nested() -> None: ...

        assert is_closure(lambda: None)
        assert is_closure(nested)
        assert not is_closure(module_level_factory)
        assert not is_closure(Widget)


class TestArguments:
    def test_missing_argument_returns_default(self, container: Container) -> None:
        plan = container.when_creating(Widget)

        assert plan.get_argument("name") is None
        assert plan.get_argument("name", "fallback") == "fallback"

    def test_plain_values_are_constants(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_argument("name", "gear")

        assert plan.get_argument("name") == "gear"

    def test_module_level_callables_are_constants(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_argument("name", module_level_factory)

        assert plan.get_argument("name") is module_level_factory

    def test_closures_are_evaluated_once(self, container: Container) -> None:
        calls: list[int] = []

        def make_name() -> str:
            calls.append(1)
            return "lazy"

        plan = container.when_creating(Widget).set_argument("name", make_name)

        assert calls == []
        assert plan.get_argument("name") == "lazy"
        assert plan.get_argument("name") == "lazy"
        assert calls == [1]

    def test_closure_parameters_are_injected(self, container: Container) -> None:
        def make_name(settings: Settings) -> str:
            return f"{settings.prefix}-widget"

        plan = container.when_creating(Widget).set_argument("name", make_name)

        assert plan.get_argument("name") == "cfg-widget"

    def test_closure_receives_container(self, container: Container) -> None:
        container.bind("widget.name", "gear")
        plan = container.when_creating(Widget).set_argument("name", lambda c: c.get("widget.name"))

        widget = plan.create_object({})

        assert widget.name == "gear"

    def test_lazy_wraps_non_closures(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_argument("name", lazy(module_level_factory))

        assert plan.get_argument("name") == "called"

    def test_setting_an_argument_drops_its_cache(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_argument("name", lambda: "first")
        assert plan.get_argument("name") == "first"

        plan.set_argument("name", lambda: "second")

        assert plan.get_argument("name") == "second"

    def test_remove_and_reset(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_arguments({"name": "gear", "size": 3})

        plan.remove_argument("name")
        assert not plan.has_argument("name")
        assert plan.has_argument("size")

        plan.reset()
        assert len(plan) == 0

    def test_get_arguments_keeps_insertion_order(self, container: Container) -> None:
        plan = container.when_creating(Widget)
        plan.set_argument("size", 2).set_argument("name", lambda: "gear")

        assert list(plan) == ["size", "name"]
        assert plan.get_arguments() == {"size": 2, "name": "gear"}

    def test_lazy_argument_needs_a_container(self) -> None:
        plan = BuildPlan(Widget).set_argument("name", lambda: "gear")

        with pytest.raises(RuntimeError, match="not attached"):
            plan.get_argument("name")

        plan.set_container(Container())
        assert plan.get_argument("name") == "gear"


class TestForwarding:
    def test_when_creating_returns_one_plan_per_class(self, container: Container) -> None:
        plan = container.when_creating(Widget)

        assert container.when_creating(Widget) is plan
        assert container.when_creating(WIDGET_NAME.upper()) is plan
        assert plan.container is container

    def test_new_instance_merges_extra_arguments(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_arguments({"name": "gear", "size": 2})

        widget = plan.new_instance({"size": 5})

        assert (widget.name, widget.size) == ("gear", 5)
        assert plan.get_argument("size") == 2

    def test_container_new_instance_uses_plan(self, container: Container) -> None:
        container.when_creating(Widget).set_argument("name", "gear")

        widget = container.new_instance(Widget)

        assert widget.name == "gear"
        assert widget.size == 1

    def test_create_shared_object_binds_shared(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_argument("name", "gear")

        first = plan.create_shared_object()
        second = plan.create_shared_object()

        assert first is second
        assert container.get(Widget) is first

    def test_create_object_is_not_shared(self, container: Container) -> None:
        plan = container.when_creating(Widget).set_argument("name", "gear")

        widget = plan.create_object()

        assert isinstance(widget, Widget)
        assert container.get(Widget) is not widget

    def test_bind_forwards_the_class(self, container: Container) -> None:
        plan = container.when_creating(Widget)

        result = plan.bind(lambda _c: Widget("bound"))

        assert result is container
        assert container.get(Widget).name == "bound"

    def test_bind_shared_forwards_the_class(self, container: Container) -> None:
        container.when_creating(Widget).bind_shared(lambda _c: Widget("shared"))

        assert container.get(Widget) is container.get(Widget)

    @pytest.mark.parametrize("operation", [Operation.NEW_INSTANCE, "new_instance"])
    def test_dispatch_accepts_names_and_members(
        self,
        container: Container,
        operation: Operation | str,
    ) -> None:
        plan = container.when_creating(Widget).set_argument("name", "gear")

        widget = plan.dispatch(operation, {"size": 9})

        assert (widget.name, widget.size) == ("gear", 9)

    @pytest.mark.parametrize("name", ["get", "prepare_object", "remove", "execute"])
    def test_unknown_operations_are_rejected(self, container: Container, name: str) -> None:
        plan = container.when_creating(Widget)

        with pytest.raises(DIForgeUnsupportedOperationError, match=rf"BuildPlan::{name}\(\) not found"):
            plan.dispatch(name)

    def test_unknown_attributes_are_rejected(self, container: Container) -> None:
        plan = container.when_creating(Widget)

        with pytest.raises(DIForgeUnsupportedOperationError) as exc_info:
            plan.prepare_shared_object()

        assert exc_info.value.method == "prepare_shared_object"
        assert isinstance(exc_info.value, AttributeError)
        assert not hasattr(plan, "missing")
