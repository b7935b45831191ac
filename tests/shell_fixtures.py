from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SliderParams:
    minimum: int = 0
    maximum: int = 100
    label: str = ""

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError("minimum above maximum")


@dataclass(frozen=True)
class FakeWidget:
    kind: str
    params: object


SAMPLE_MODEL = {
    "menus": [
        {
            "id": "file",
            "label": "File",
            "items": [
                {"id": "open", "label": "Open", "action": "file.open", "shortcut": "Ctrl+O"},
                {"id": "save", "label": "Save", "action": "file.save"},
                {
                    "id": "recent",
                    "label": "Recent",
                    "submenu": {
                        "id": "recent-menu",
                        "label": "Recent",
                        "items": [{"id": "a.csv", "label": "a.csv"}],
                    },
                },
            ],
        },
        {
            "id": "edit",
            "label": "Edit",
            "items": [{"id": "undo", "label": "Undo"}, {"id": "redo", "label": "Redo"}],
        },
    ],
    "compartments": [
        {
            "id": "draw",
            "title": "Draw",
            "entries": [
                {"id": "pen", "widget_kind": "button", "params": {"text": "Pen"}},
                {"id": "size", "widget_kind": "slider", "params": {"minimum": 1, "maximum": 9}},
            ],
        },
        {
            "id": "data",
            "title": "Data",
            "entries": [{"id": "table", "widget_kind": "button", "params": {}}],
        },
    ],
}
