"""Composition engine.

Walks a descriptor model together with the interaction state and produces a
``WidgetNode`` tree. Tool entries, document bodies and dialogs are resolved
through a registry snapshot taken at the start of each pass; anything that
cannot be built becomes a placeholder node instead of being dropped.

A ``Composer`` remembers the nodes of its previous pass. A node is reused by
reference when its descriptor object, its state-derived inputs and its
children are all unchanged, so toggling one compartment or opening one menu
only rebuilds the affected branch and its ancestors.

``Composer.misses`` lists every placeholder in the latest tree, including
ones reused from the previous pass. Only freshly built placeholders are
logged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from .config import ShellConfig, logo_path
from .descriptors import (
    CompartmentDescriptor,
    DescriptorModel,
    DialogRequest,
    DocumentRef,
    MenuDescriptor,
    MenuItem,
    ToolEntry,
)
from .errors import FACTORY_ERROR, INVALID_PARAMS, UNRESOLVED_KIND, ParamsError, ResolutionMiss
from .registry import RegistrySnapshot, WidgetRegistry, build_params
from .store import InteractionState
from . import tree
from .tree import WidgetNode

logger = logging.getLogger(__name__)

_MemoEntry = Tuple[Any, Tuple[Any, ...], WidgetNode]


class Composer:
    def __init__(self, registry: WidgetRegistry, config: Optional[ShellConfig] = None) -> None:
        self._registry = registry
        self._config = config or ShellConfig()
        self._memo: Dict[Hashable, _MemoEntry] = {}
        self.rebuilt: List[str] = []
        self.misses: List[ResolutionMiss] = []
        self.last_version: Optional[int] = None

    @property
    def config(self) -> ShellConfig:
        return self._config

    def reset(self) -> None:
        self._memo = {}

    def compose(self, model: DescriptorModel, state: InteractionState) -> WidgetNode:
        snapshot = self._registry.snapshot()
        composition = _CompositionPass(snapshot, self._config, self._memo)
        root = composition.root(model, state)
        self._memo = composition.memo
        self.rebuilt = composition.rebuilt
        self.misses = composition.misses
        self.last_version = snapshot.version
        return root


def compose(
    model: DescriptorModel,
    state: InteractionState,
    registry: WidgetRegistry,
    config: Optional[ShellConfig] = None,
) -> WidgetNode:
    """Single pass with no memory of earlier passes."""
    return Composer(registry, config).compose(model, state)


class _CompositionPass:
    def __init__(
        self,
        snapshot: RegistrySnapshot,
        config: ShellConfig,
        previous: Dict[Hashable, _MemoEntry],
    ) -> None:
        self._snapshot = snapshot
        self._config = config
        self._previous = previous
        self.memo: Dict[Hashable, _MemoEntry] = {}
        self.rebuilt: List[str] = []
        self.misses: List[ResolutionMiss] = []

    # -- memo ---------------------------------------------------------------

    def _node(
        self,
        memo_key: Hashable,
        source: Any,
        deps: Tuple[Any, ...],
        build: Callable[[], WidgetNode],
    ) -> WidgetNode:
        prev = self._previous.get(memo_key)
        if prev is not None and prev[0] is source and prev[1] == deps:
            node = prev[2]
            if node.role == tree.PLACEHOLDER:
                self.misses.append(_reused_miss(node))
        else:
            node = build()
            self.rebuilt.append(node.key)
        self.memo[memo_key] = (source, deps, node)
        return node

    def _container(
        self,
        memo_key: Hashable,
        source: Any,
        role: str,
        key: str,
        props: Dict[str, Any],
        children: Sequence[WidgetNode],
    ) -> WidgetNode:
        children = tuple(children)
        deps = (tuple(sorted(props.items(), key=lambda kv: kv[0])), tuple(id(c) for c in children))
        return self._node(
            memo_key,
            source,
            deps,
            lambda: WidgetNode(role=role, key=key, props=props, children=children),
        )

    # -- root ---------------------------------------------------------------

    def root(self, model: DescriptorModel, state: InteractionState) -> WidgetNode:
        children = [
            self._app_bar(),
            self._menu_bar(model.menus, state.active_menu_path),
            self._tool_box(model.compartments, state.expanded_compartment_ids),
            self._document_panel(state),
            self._dialog_layer(state.dialog_queue),
        ]
        return self._container(tree.ROOT, model, tree.ROOT, tree.ROOT, {}, children)

    def _app_bar(self) -> WidgetNode:
        config = self._config
        return self._node(
            tree.APP_BAR,
            config,
            (),
            lambda: WidgetNode(
                role=tree.APP_BAR,
                key=tree.APP_BAR,
                props={"title": config.app_title, "image": logo_path(config)},
            ),
        )

    # -- menus --------------------------------------------------------------

    def _menu_bar(self, menus: Sequence[MenuDescriptor], active_path: Tuple[str, ...]) -> WidgetNode:
        children = [self._menu(menu, active_path) for menu in menus]
        props = {"open_menu": active_path[0] if active_path else None}
        return self._container(tree.MENU_BAR, menus, tree.MENU_BAR, tree.MENU_BAR, props, children)

    def _menu(self, menu: MenuDescriptor, active_path: Tuple[str, ...]) -> WidgetNode:
        prefix = (menu.id,)
        is_open = _on_path(prefix, active_path)
        items = self._items(menu, prefix, active_path) if is_open else []
        props = {"id": menu.id, "label": menu.label, "open": is_open, "path": prefix}
        return self._container(
            ("menu", menu.id),
            menu,
            tree.MENU,
            f"menu:{menu.id}",
            props,
            items,
        )

    def _items(
        self,
        menu: MenuDescriptor,
        prefix: Tuple[str, ...],
        active_path: Tuple[str, ...],
    ) -> List[WidgetNode]:
        return [self._item(item, prefix + (item.id,), active_path) for item in menu.items]

    def _item(self, item: MenuItem, path: Tuple[str, ...], active_path: Tuple[str, ...]) -> WidgetNode:
        submenu_open = item.submenu is not None and _on_path(path, active_path)
        children = self._items(item.submenu, path, active_path) if submenu_open else []
        props = {
            "id": item.id,
            "label": item.label,
            "icon": item.icon,
            "action_id": item.action_id,
            "shortcut": item.shortcut,
            "separator": item.separator,
            "has_submenu": item.submenu is not None,
            "open": submenu_open,
            "path": path,
        }
        return self._container(
            ("item", path),
            item,
            tree.MENU_ITEM,
            "menu:" + "/".join(path),
            props,
            children,
        )

    # -- tool box -----------------------------------------------------------

    def _tool_box(self, compartments: Sequence[CompartmentDescriptor], expanded: frozenset) -> WidgetNode:
        children = [self._compartment(c, c.id in expanded) for c in compartments]
        props = {"title": self._config.toolbox_title}
        return self._container(tree.TOOL_BOX, compartments, tree.TOOL_BOX, tree.TOOL_BOX, props, children)

    def _compartment(self, compartment: CompartmentDescriptor, expanded: bool) -> WidgetNode:
        tools = [self._tool(compartment, entry) for entry in compartment.entries] if expanded else []
        props = {
            "id": compartment.id,
            "title": compartment.title,
            "expanded": expanded,
            "entry_count": len(compartment.entries),
        }
        return self._container(
            ("compartment", compartment.id),
            compartment,
            tree.COMPARTMENT,
            f"compartment:{compartment.id}",
            props,
            tools,
        )

    def _tool(self, compartment: CompartmentDescriptor, entry: ToolEntry) -> WidgetNode:
        slot_key = f"tool:{compartment.id}/{entry.id}"
        kind_entry = self._snapshot.entry(entry.widget_kind)
        props = {"id": entry.id, "widget_kind": entry.widget_kind, "compartment_id": compartment.id}
        return self._node(
            ("tool", compartment.id, entry.id),
            entry,
            (kind_entry,),
            lambda: self._resolve(tree.TOOL, slot_key, entry.widget_kind, props, lambda p: build_params(p, entry.params)),
        )

    # -- documents ----------------------------------------------------------

    def _document_panel(self, state: InteractionState) -> WidgetNode:
        children: List[WidgetNode] = [
            self._document_tab(ref, ref.id == state.active_document_id) for ref in state.open_documents
        ]
        active = state.active_document
        if active is not None:
            children.append(self._document(active))
        props = {"active_document_id": state.active_document_id, "empty": active is None}
        return self._container(
            tree.DOCUMENT_PANEL,
            None,
            tree.DOCUMENT_PANEL,
            tree.DOCUMENT_PANEL,
            props,
            children,
        )

    def _document_tab(self, ref: DocumentRef, active: bool) -> WidgetNode:
        return self._node(
            ("tab", ref.id),
            ref,
            (active,),
            lambda: WidgetNode(
                role=tree.DOCUMENT_TAB,
                key=f"tab:{ref.id}",
                props={"id": ref.id, "title": ref.title or ref.id, "kind": ref.kind, "active": active},
            ),
        )

    def _document(self, ref: DocumentRef) -> WidgetNode:
        kind_entry = self._snapshot.entry(ref.kind)
        props = {"id": ref.id, "kind": ref.kind}
        return self._node(
            ("document", ref.id),
            ref,
            (kind_entry,),
            lambda: self._resolve(tree.DOCUMENT, f"document:{ref.id}", ref.kind, props, lambda _p: ref),
        )

    # -- dialogs ------------------------------------------------------------

    def _dialog_layer(self, queue: Tuple[DialogRequest, ...]) -> WidgetNode:
        children = [self._dialog(queue[0])] if queue else []
        props = {"modal": bool(queue), "pending": max(len(queue) - 1, 0)}
        return self._container(
            tree.DIALOG_LAYER,
            None,
            tree.DIALOG_LAYER,
            tree.DIALOG_LAYER,
            props,
            children,
        )

    def _dialog(self, request: DialogRequest) -> WidgetNode:
        kind_entry = self._snapshot.entry(request.kind)
        props = {"id": request.id, "kind": request.kind}
        return self._node(
            ("dialog", request.id),
            request,
            (kind_entry,),
            lambda: self._resolve(
                tree.DIALOG,
                f"dialog:{request.id}",
                request.kind,
                props,
                lambda p: _dialog_params(p, request.payload),
            ),
        )

    # -- resolution ---------------------------------------------------------

    def _resolve(
        self,
        role: str,
        slot_key: str,
        kind: str,
        props: Dict[str, Any],
        make_params: Callable[[Optional[type]], Any],
    ) -> WidgetNode:
        entry = self._snapshot.entry(kind)
        if entry is None:
            return self._placeholder(slot_key, kind, props, UNRESOLVED_KIND, "no factory registered")
        try:
            params = make_params(entry.params_type)
        except ParamsError as exc:
            return self._placeholder(slot_key, kind, props, INVALID_PARAMS, str(exc))
        try:
            widget = entry.factory(params)
        except Exception as exc:
            return self._placeholder(slot_key, kind, props, FACTORY_ERROR, f"{type(exc).__name__}: {exc}")
        return WidgetNode(role=role, key=slot_key, props=props, widget=widget)

    def _placeholder(
        self,
        slot_key: str,
        kind: str,
        props: Dict[str, Any],
        reason: str,
        detail: str,
    ) -> WidgetNode:
        miss = ResolutionMiss(slot_key=slot_key, widget_kind=kind, reason=reason, detail=detail)
        self.misses.append(miss)
        logger.warning("placeholder for %s (kind=%s reason=%s): %s", slot_key, kind, reason, detail)
        placeholder_props = dict(props)
        placeholder_props.update({"text": self._config.placeholder_text, "detail": detail})
        return WidgetNode(role=tree.PLACEHOLDER, key=slot_key, props=placeholder_props, error=reason)


def _dialog_params(params_type: Optional[type], payload: Any) -> Any:
    # Payloads are opaque unless the dialog kind declares a params type.
    if params_type is None:
        return payload
    return build_params(params_type, {} if payload is None else payload)


def _reused_miss(node: WidgetNode) -> ResolutionMiss:
    props = node.props
    return ResolutionMiss(
        slot_key=node.key,
        widget_kind=props.get("widget_kind", props.get("kind", "")),
        reason=node.error or "",
        detail=props.get("detail", ""),
    )


def _on_path(prefix: Tuple[str, ...], active_path: Tuple[str, ...]) -> bool:
    return len(active_path) >= len(prefix) and active_path[: len(prefix)] == prefix
