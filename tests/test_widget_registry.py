import threading

import pytest

from shell_core.errors import ConflictError, ParamsError
from shell_core.registry import REGISTERED, UNREGISTERED, WidgetRegistry, build_params
from shell_fixtures import FakeWidget, SliderParams


def _button(params):
    return FakeWidget("button", params)


def _other_button(params):
    return FakeWidget("other", params)


def test_register_and_resolve() -> None:
    reg = WidgetRegistry()
    reg.register("button", _button)
    assert reg.resolve("button") is _button
    assert "button" in reg
    assert reg.kinds() == ["button"]


def test_resolve_unknown_kind_returns_none() -> None:
    assert WidgetRegistry().resolve("unknown_x") is None


def test_register_identical_factory_is_noop() -> None:
    reg = WidgetRegistry()
    reg.register("button", _button)
    version = reg.version
    reg.register("button", _button)
    assert reg.version == version


def test_register_conflict_keeps_existing() -> None:
    reg = WidgetRegistry()
    reg.register("button", _button)
    with pytest.raises(ConflictError) as info:
        reg.register("button", _other_button)
    assert info.value.kind == "button"
    assert reg.resolve("button") is _button


def test_same_factory_with_different_params_type_conflicts() -> None:
    reg = WidgetRegistry()
    reg.register("slider", _button)
    with pytest.raises(ConflictError):
        reg.register("slider", _button, SliderParams)


def test_register_rejects_bad_input() -> None:
    reg = WidgetRegistry()
    with pytest.raises(ValueError):
        reg.register("", _button)
    with pytest.raises(TypeError):
        reg.register("button", "not callable")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        reg.register("button", _button, dict)


def test_unregister_removes_kind_and_bumps_version() -> None:
    reg = WidgetRegistry()
    reg.register("button", _button)
    version = reg.version
    assert reg.unregister("button") is True
    assert reg.resolve("button") is None
    assert reg.version == version + 1
    assert reg.unregister("button") is False
    assert reg.version == version + 1


def test_snapshot_is_isolated_from_later_changes() -> None:
    reg = WidgetRegistry()
    reg.register("button", _button)
    snapshot = reg.snapshot()
    reg.unregister("button")
    reg.register("slider", _button, SliderParams)
    assert snapshot.resolve("button") is _button
    assert snapshot.resolve("slider") is None
    assert snapshot.version < reg.version


def test_listeners_see_changes() -> None:
    reg = WidgetRegistry()
    seen = []
    reg.add_listener(lambda kind, change: seen.append((kind, change)))
    reg.register("button", _button)
    reg.register("button", _button)
    reg.unregister("button")
    assert seen == [("button", REGISTERED), ("button", UNREGISTERED)]


def test_failing_listener_does_not_break_registration() -> None:
    reg = WidgetRegistry()

    def _boom(kind, change):
        raise RuntimeError("listener down")

    reg.add_listener(_boom)
    reg.register("button", _button)
    assert reg.resolve("button") is _button


def test_build_params_typed_and_untyped() -> None:
    params = build_params(SliderParams, {"minimum": 2, "label": "Size"})
    assert params == SliderParams(minimum=2, maximum=100, label="Size")

    raw = build_params(None, {"text": "Pen"})
    assert raw["text"] == "Pen"
    with pytest.raises(TypeError):
        raw["text"] = "Brush"  # type: ignore[index]


def test_build_params_rejects_unknown_keys_and_bad_values() -> None:
    with pytest.raises(ParamsError):
        build_params(SliderParams, {"colour": "red"})
    with pytest.raises(ParamsError):
        build_params(SliderParams, {"minimum": 5, "maximum": 1})
    with pytest.raises(ParamsError):
        build_params(None, ["not", "a", "mapping"])  # type: ignore[arg-type]


def test_registry_builds_params_for_kind() -> None:
    registry = WidgetRegistry()
    registry.register("slider", lambda params: FakeWidget("slider", params), SliderParams)
    assert registry.build_params("slider", {"maximum": 9}) == SliderParams(maximum=9)
    assert registry.build_params("unknown", {"a": 1})["a"] == 1
    with pytest.raises(ParamsError):
        registry.build_params("slider", {"step": 2})


def test_concurrent_registration_is_serialized() -> None:
    reg = WidgetRegistry()
    errors = []

    def _worker(index: int) -> None:
        try:
            reg.register(f"kind-{index}", _button)
        except Exception as exc:  # pragma: no cover - surfaced via assert
            errors.append(exc)

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []
    assert len(reg.kinds()) == 16
    assert reg.version == 16
