from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from PyQt6 import QtCore, QtWidgets

from shell_bus import topics

from . import tree
from .actions import Accepted, ActivateDocument, Cancelled, CloseMenu, OpenMenu, ResolveDialog, ToggleCompartment
from .session import Session
from .tree import WidgetNode

logger = logging.getLogger(__name__)

_ERROR_STYLE = "color: #b00;"


class ShellHost(QtWidgets.QWidget):
    """Paints a session's widget tree and forwards clicks as actions.

    Qt widgets are cached by node key. A node object reused by the composer
    keeps its Qt widget; everything else is rebuilt and the stale widgets are
    released with ``deleteLater``.
    """

    actionTriggered = QtCore.pyqtSignal(str)

    def __init__(self, session: Session, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._session = session
        self._cache: Dict[str, Tuple[WidgetNode, QtWidgets.QWidget]] = {}
        self._root: Optional[WidgetNode] = None

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._layout = layout

        self._subscriptions = [
            session.bus.subscribe(topic, self._on_bus_event)
            for topic in (topics.STATE_CHANGED, topics.REGISTRY_CHANGED, topics.DESCRIPTORS_SWAPPED)
        ]
        self.refresh()

    def refresh(self) -> None:
        root = self._session.current_tree()
        if root is self._root:
            return
        previous = self._cache
        live: Dict[str, Tuple[WidgetNode, QtWidgets.QWidget]] = {}
        root_widget = self._render(root, previous, live)
        if self._layout.count() == 0 or self._layout.itemAt(0).widget() is not root_widget:
            while self._layout.count():
                self._layout.takeAt(0)
            self._layout.addWidget(root_widget)
        for key, (node, widget) in previous.items():
            kept = live.get(key)
            if kept is None or kept[1] is not widget:
                widget.setParent(None)
                widget.deleteLater()
        self._cache = live
        self._root = root

    def widget_for(self, key: str) -> Optional[QtWidgets.QWidget]:
        cached = self._cache.get(key)
        return cached[1] if cached else None

    def unmount(self) -> None:
        for sub_id in self._subscriptions:
            self._session.bus.unsubscribe(sub_id)
        self._subscriptions = []

    def closeEvent(self, event) -> None:
        self.unmount()
        super().closeEvent(event)

    # -- rendering ----------------------------------------------------------

    def _render(
        self,
        node: WidgetNode,
        previous: Dict[str, Tuple[WidgetNode, QtWidgets.QWidget]],
        live: Dict[str, Tuple[WidgetNode, QtWidgets.QWidget]],
    ) -> QtWidgets.QWidget:
        cached = previous.get(node.key)
        if cached is not None and cached[0] is node:
            for sub in node.walk():
                if sub.key in previous:
                    live[sub.key] = previous[sub.key]
            return cached[1]
        children = [self._render(child, previous, live) for child in node.children]
        try:
            widget = self._build(node, children)
        except Exception as exc:
            logger.error("failed to paint %s: %s", node.key, exc)
            widget = _error_label(f"Failed to open {node.key}: {exc}")
        live[node.key] = (node, widget)
        return widget

    def _build(self, node: WidgetNode, children: List[QtWidgets.QWidget]) -> QtWidgets.QWidget:
        role = node.role
        props = node.props
        if role == tree.ROOT:
            return self._build_root(node, children)
        if role == tree.APP_BAR:
            label = QtWidgets.QLabel(str(props.get("title", "")))
            label.setStyleSheet("font-size: 18px; font-weight: bold;")
            label.setToolTip(str(props.get("image", "")))
            return label
        if role == tree.MENU_BAR:
            return _box(children, horizontal=True)
        if role == tree.MENU:
            path = tuple(props.get("path", ()))
            button = QtWidgets.QPushButton(str(props.get("label", "")))
            button.setCheckable(True)
            button.setChecked(bool(props.get("open")))
            if props.get("open"):
                button.clicked.connect(lambda _checked=False: self._dispatch(CloseMenu()))
            else:
                button.clicked.connect(lambda _checked=False, p=path: self._dispatch(OpenMenu(p)))
            return _box([button] + children)
        if role == tree.MENU_ITEM:
            return self._build_menu_item(node, children)
        if role == tree.TOOL_BOX:
            group = QtWidgets.QGroupBox(str(props.get("title", "")))
            _fill(QtWidgets.QVBoxLayout(group), children)
            return group
        if role == tree.COMPARTMENT:
            header = QtWidgets.QToolButton()
            header.setText(str(props.get("title", "")))
            header.setCheckable(True)
            header.setChecked(bool(props.get("expanded")))
            compartment_id = props.get("id")
            header.clicked.connect(
                lambda _checked=False, c=compartment_id: self._dispatch(ToggleCompartment(c))
            )
            return _box([header] + children)
        if role in (tree.TOOL, tree.DOCUMENT, tree.DIALOG):
            return _embed(node.widget)
        if role == tree.PLACEHOLDER:
            label = _error_label(f"{props.get('text', '')}: {props.get('id', node.key)}")
            label.setToolTip(f"{node.error}: {props.get('detail', '')}")
            return label
        if role == tree.DOCUMENT_PANEL:
            tabs = [w for w, c in zip(children, node.children) if c.role == tree.DOCUMENT_TAB]
            bodies = [w for w, c in zip(children, node.children) if c.role != tree.DOCUMENT_TAB]
            return _box([_box(tabs, horizontal=True)] + bodies)
        if role == tree.DOCUMENT_TAB:
            tab = QtWidgets.QPushButton(str(props.get("title", "")))
            tab.setCheckable(True)
            tab.setChecked(bool(props.get("active")))
            doc_id = props.get("id")
            tab.clicked.connect(lambda _checked=False, d=doc_id: self._dispatch(ActivateDocument(d)))
            return tab
        if role == tree.DIALOG_LAYER:
            return self._build_dialog_layer(node, children)
        return _box(children)

    def _build_root(self, node: WidgetNode, children: List[QtWidgets.QWidget]) -> QtWidgets.QWidget:
        by_role = {child.role: widget for child, widget in zip(node.children, children)}
        root = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(root)
        layout.setContentsMargins(0, 0, 0, 0)
        for role in (tree.APP_BAR, tree.MENU_BAR):
            if role in by_role:
                layout.addWidget(by_role[role])
        body = QtWidgets.QHBoxLayout()
        if tree.TOOL_BOX in by_role:
            body.addWidget(by_role[tree.TOOL_BOX], stretch=1)
        if tree.DOCUMENT_PANEL in by_role:
            body.addWidget(by_role[tree.DOCUMENT_PANEL], stretch=3)
        layout.addLayout(body, stretch=1)
        if tree.DIALOG_LAYER in by_role:
            layout.addWidget(by_role[tree.DIALOG_LAYER])
        return root

    def _build_menu_item(self, node: WidgetNode, children: List[QtWidgets.QWidget]) -> QtWidgets.QWidget:
        props = node.props
        if props.get("separator"):
            line = QtWidgets.QFrame()
            line.setFrameShape(QtWidgets.QFrame.Shape.HLine)
            return line
        path = tuple(props.get("path", ()))
        button = QtWidgets.QPushButton(str(props.get("label", "")))
        if props.get("shortcut"):
            button.setToolTip(str(props["shortcut"]))
        if props.get("has_submenu"):
            target = path[:-1] if props.get("open") else path
            button.clicked.connect(lambda _checked=False, p=target: self._dispatch(OpenMenu(p)))
        else:
            action_id = props.get("action_id") or props.get("id")
            button.clicked.connect(lambda _checked=False, a=action_id: self._trigger(a))
        if not children:
            return button
        container = _box([button] + children)
        container.layout().setContentsMargins(12, 0, 0, 0)
        return container

    def _build_dialog_layer(self, node: WidgetNode, children: List[QtWidgets.QWidget]) -> QtWidgets.QWidget:
        frame = QtWidgets.QFrame()
        frame.setFrameShape(QtWidgets.QFrame.Shape.StyledPanel)
        layout = QtWidgets.QVBoxLayout(frame)
        _fill(layout, children)
        if node.props.get("modal"):
            buttons = QtWidgets.QDialogButtonBox(
                QtWidgets.QDialogButtonBox.StandardButton.Ok
                | QtWidgets.QDialogButtonBox.StandardButton.Cancel
            )
            buttons.accepted.connect(lambda: self._dispatch(ResolveDialog(Accepted())))
            buttons.rejected.connect(lambda: self._dispatch(ResolveDialog(Cancelled("user"))))
            layout.addWidget(buttons)
            pending = int(node.props.get("pending", 0))
            if pending:
                layout.addWidget(QtWidgets.QLabel(f"{pending} more pending"))
        frame.setVisible(bool(node.props.get("modal")))
        return frame

    # -- events -------------------------------------------------------------

    def _dispatch(self, action: Any) -> None:
        self._session.dispatch(action)

    def _trigger(self, action_id: str) -> None:
        self._session.dispatch(CloseMenu())
        self.actionTriggered.emit(str(action_id))

    def _on_bus_event(self, envelope) -> None:
        self.refresh()


def _embed(widget: Any) -> QtWidgets.QWidget:
    if isinstance(widget, QtWidgets.QWidget):
        return widget
    return QtWidgets.QLabel(str(widget))


def _error_label(text: str) -> QtWidgets.QLabel:
    label = QtWidgets.QLabel(text)
    label.setStyleSheet(_ERROR_STYLE)
    return label


def _box(children: List[QtWidgets.QWidget], horizontal: bool = False) -> QtWidgets.QWidget:
    container = QtWidgets.QWidget()
    layout = QtWidgets.QHBoxLayout(container) if horizontal else QtWidgets.QVBoxLayout(container)
    layout.setContentsMargins(0, 0, 0, 0)
    _fill(layout, children)
    return container


def _fill(layout: QtWidgets.QBoxLayout, children: List[QtWidgets.QWidget]) -> None:
    for child in children:
        layout.addWidget(child)
