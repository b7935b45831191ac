from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

# Node roles produced by the composer.
ROOT = "root"
APP_BAR = "app_bar"
MENU_BAR = "menu_bar"
MENU = "menu"
MENU_ITEM = "menu_item"
TOOL_BOX = "tool_box"
COMPARTMENT = "compartment"
TOOL = "tool"
PLACEHOLDER = "placeholder"
DOCUMENT_PANEL = "document_panel"
DOCUMENT_TAB = "document_tab"
DOCUMENT = "document"
DIALOG_LAYER = "dialog_layer"
DIALOG = "dialog"


@dataclass(frozen=True)
class WidgetNode:
    """One node of a composed widget tree.

    ``widget`` holds whatever the registered factory returned and is left out
    of equality, so two passes over equal inputs compare equal.
    """

    role: str
    key: str
    props: Dict[str, Any] = field(default_factory=dict)
    children: Tuple["WidgetNode", ...] = ()
    widget: Any = field(default=None, compare=False, repr=False)
    error: Optional[str] = None

    def walk(self) -> Iterator["WidgetNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, key: str) -> Optional["WidgetNode"]:
        for node in self.walk():
            if node.key == key:
                return node
        return None

    def child(self, role: str) -> Optional["WidgetNode"]:
        for node in self.children:
            if node.role == role:
                return node
        return None

    def placeholders(self) -> list:
        return [node for node in self.walk() if node.role == PLACEHOLDER]


WidgetTree = WidgetNode
