import pytest

from shell_bus import ShellBus, topics
from shell_core import tree
from shell_core.actions import ActivateDocument, OpenDocument, OpenMenu, ToggleCompartment
from shell_core.descriptors import DocumentRef
from shell_core.errors import DescriptorValidationError
from shell_core.session import current_tree, dispatch, mount
from shell_core.store import InteractionState
from shell_fixtures import SAMPLE_MODEL, FakeWidget


class _DictSource:
    def __init__(self, contents):
        self.contents = contents
        self.calls = []

    def get_content(self, handle):
        self.calls.append(handle)
        return self.contents[handle]


def test_mount_accepts_mapping_and_composes(registry) -> None:
    session = mount(SAMPLE_MODEL, registry=registry)
    root = current_tree(session)
    assert root.role == tree.ROOT
    assert [menu.key for menu in root.child(tree.MENU_BAR).children] == ["menu:file", "menu:edit"]


def test_mount_rejects_invalid_model() -> None:
    bad = {"menus": [{"id": "file", "items": [{"id": "x"}, {"id": "x"}]}]}
    with pytest.raises(DescriptorValidationError):
        mount(bad)


def test_dispatch_updates_tree_scenario(registry) -> None:
    session = mount(SAMPLE_MODEL, registry=registry)
    state = dispatch(session, OpenMenu(["file"]))
    assert state.active_menu_path == ("file",)
    keys = {node.key for node in current_tree(session).walk()}
    assert {"menu:file/open", "menu:file/save"} <= keys
    assert not any(key.startswith("menu:edit/") for key in keys)


def test_current_tree_is_cached_between_changes(registry) -> None:
    session = mount(SAMPLE_MODEL, registry=registry)
    first = current_tree(session)
    assert current_tree(session) is first
    dispatch(session, ToggleCompartment("draw"))
    second = current_tree(session)
    assert second is not first
    assert second.child(tree.MENU_BAR) is first.child(tree.MENU_BAR)


def test_initial_state_is_honoured(registry) -> None:
    initial = InteractionState(expanded_compartment_ids=frozenset({"data"}))
    session = mount(SAMPLE_MODEL, initial, registry=registry)
    assert session.state is initial
    assert current_tree(session).find("tool:data/table") is not None


def test_registry_change_recomposes(registry) -> None:
    session = mount(SAMPLE_MODEL, InteractionState(expanded_compartment_ids=frozenset({"data"})), registry=registry)
    assert current_tree(session).find("tool:data/table").role == tree.TOOL
    registry.unregister("button")
    assert current_tree(session).find("tool:data/table").role == tree.PLACEHOLDER


def test_swap_descriptors_rebuilds(registry) -> None:
    session = mount(SAMPLE_MODEL, registry=registry)
    before = current_tree(session)
    session.swap_descriptors({"menus": [{"id": "help", "label": "Help", "items": []}]})
    after = current_tree(session)
    assert [menu.key for menu in after.child(tree.MENU_BAR).children] == ["menu:help"]
    assert after.child(tree.APP_BAR) is not before.child(tree.APP_BAR)
    assert after.child(tree.TOOL_BOX).children == ()


def test_swap_to_invalid_model_keeps_old_one(registry) -> None:
    session = mount(SAMPLE_MODEL, registry=registry)
    with pytest.raises(DescriptorValidationError):
        session.swap_descriptors({"compartments": [{"id": "c", "entries": [{"id": "t", "widget_kind": ""}]}]})
    assert [menu.id for menu in session.model.menus] == ["file", "edit"]


def test_bus_notifications(registry) -> None:
    bus = ShellBus()
    seen = []
    for topic in (topics.STATE_CHANGED, topics.REGISTRY_CHANGED, topics.DESCRIPTORS_SWAPPED, topics.SESSION_CLOSED):
        bus.subscribe(topic, lambda msg: seen.append((msg.type, msg.payload)))
    session = mount(SAMPLE_MODEL, registry=registry, bus=bus)

    dispatch(session, OpenMenu(["file"]))
    dispatch(session, ActivateDocument("nope"))
    registry.register("label", lambda params: FakeWidget("label", params))
    session.swap_descriptors(SAMPLE_MODEL)
    session.close()
    registry.unregister("label")

    assert seen == [
        (topics.STATE_CHANGED, {"action": "OpenMenu"}),
        (topics.REGISTRY_CHANGED, {"kind": "label", "change": "registered"}),
        (topics.DESCRIPTORS_SWAPPED, {}),
        (topics.SESSION_CLOSED, {}),
    ]


def test_document_content_goes_through_source(registry) -> None:
    source = _DictSource({"h1": "hello"})
    session = mount(SAMPLE_MODEL, registry=registry, document_source=source)
    dispatch(session, OpenDocument(DocumentRef(id="doc-1", kind="text", content_handle="h1")))
    assert session.document_content("doc-1") == "hello"
    assert source.calls == ["h1"]
    with pytest.raises(KeyError):
        session.document_content("doc-2")


def test_document_content_without_source(registry) -> None:
    session = mount(SAMPLE_MODEL, registry=registry)
    dispatch(session, OpenDocument(DocumentRef(id="doc-1", kind="text")))
    with pytest.raises(LookupError):
        session.document_content("doc-1")


def test_sessions_are_independent() -> None:
    first = mount(SAMPLE_MODEL)
    second = mount(SAMPLE_MODEL)
    dispatch(first, ToggleCompartment("draw"))
    assert second.state.expanded_compartment_ids == frozenset()
    assert first.registry is not second.registry
