"""Descriptor model: data-only menu, compartment, document and dialog types."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Set, Tuple

from .errors import DescriptorValidationError, ValidationIssue

# Top-level menus sit at depth 1; each submenu adds one.
MAX_MENU_DEPTH = 16


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str
    icon: Optional[str] = None
    action_id: Optional[str] = None
    submenu: Optional["MenuDescriptor"] = None
    shortcut: Optional[str] = None
    separator: bool = False


@dataclass(frozen=True)
class MenuDescriptor:
    id: str
    label: str
    items: Tuple[MenuItem, ...] = ()


@dataclass(frozen=True)
class ToolEntry:
    id: str
    widget_kind: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.params, Mapping) and not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass(frozen=True)
class CompartmentDescriptor:
    id: str
    title: str
    entries: Tuple[ToolEntry, ...] = ()


@dataclass(frozen=True)
class DescriptorModel:
    menus: Tuple[MenuDescriptor, ...] = ()
    compartments: Tuple[CompartmentDescriptor, ...] = ()


@dataclass(frozen=True)
class DocumentRef:
    id: str
    kind: str
    content_handle: Any = field(default=None, compare=False)
    title: Optional[str] = None


@dataclass(frozen=True)
class DialogRequest:
    id: str
    kind: str
    payload: Any = field(default_factory=dict)
    on_result: Optional[Callable[[Any], None]] = field(default=None, compare=False, repr=False)


# --- mapping parsers -------------------------------------------------------


def model_from_dict(data: Mapping[str, Any]) -> DescriptorModel:
    issues: List[ValidationIssue] = []
    if not isinstance(data, Mapping):
        raise DescriptorValidationError([ValidationIssue("$", "descriptor model must be a mapping")])
    menus = _parse_list(data.get("menus", []), "$.menus", issues, _parse_menu)
    compartments = _parse_list(
        data.get("compartments", []), "$.compartments", issues, _parse_compartment
    )
    if issues:
        raise DescriptorValidationError(issues)
    return DescriptorModel(menus=tuple(menus), compartments=tuple(compartments))


def menu_from_dict(data: Mapping[str, Any]) -> MenuDescriptor:
    issues: List[ValidationIssue] = []
    menu = _parse_menu(data, "$", issues, set())
    if issues or menu is None:
        raise DescriptorValidationError(issues or [ValidationIssue("$", "invalid menu")])
    return menu


def compartment_from_dict(data: Mapping[str, Any]) -> CompartmentDescriptor:
    issues: List[ValidationIssue] = []
    compartment = _parse_compartment(data, "$", issues, set())
    if issues or compartment is None:
        raise DescriptorValidationError(issues or [ValidationIssue("$", "invalid compartment")])
    return compartment


def _parse_list(raw: Any, path: str, issues: List[ValidationIssue], parse) -> list:
    if not isinstance(raw, (list, tuple)):
        issues.append(ValidationIssue(path, "expected a list"))
        return []
    out = []
    for index, entry in enumerate(raw):
        parsed = parse(entry, f"{path}[{index}]", issues, set())
        if parsed is not None:
            out.append(parsed)
    return out


def _text(data: Mapping[str, Any], key: str, path: str, issues: List[ValidationIssue]) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        issues.append(ValidationIssue(f"{path}.{key}", "expected a string"))
        return ""
    return value


def _optional_text(data: Mapping[str, Any], key: str, path: str, issues: List[ValidationIssue]) -> Optional[str]:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    issues.append(ValidationIssue(f"{path}.{key}", "expected a string or null"))
    return None


def _parse_menu(
    data: Any,
    path: str,
    issues: List[ValidationIssue],
    stack: Set[int],
    depth: int = 1,
) -> Optional[MenuDescriptor]:
    if not isinstance(data, Mapping):
        issues.append(ValidationIssue(path, "menu must be a mapping"))
        return None
    if depth > MAX_MENU_DEPTH:
        issues.append(ValidationIssue(path, f"submenus nest deeper than {MAX_MENU_DEPTH} levels"))
        return None
    if id(data) in stack:
        issues.append(ValidationIssue(path, "submenu nesting forms a cycle"))
        return None
    stack = stack | {id(data)}
    menu_id = _text(data, "id", path, issues)
    label = data.get("label", menu_id)
    if not isinstance(label, str):
        issues.append(ValidationIssue(f"{path}.label", "expected a string"))
        label = menu_id
    raw_items = data.get("items", [])
    if not isinstance(raw_items, (list, tuple)):
        issues.append(ValidationIssue(f"{path}.items", "expected a list"))
        raw_items = []
    items: List[MenuItem] = []
    for index, raw in enumerate(raw_items):
        item_path = f"{path}.items[{index}]"
        if not isinstance(raw, Mapping):
            issues.append(ValidationIssue(item_path, "menu item must be a mapping"))
            continue
        if raw.get("type") == "separator" or raw.get("separator") is True:
            sep_id = raw.get("id")
            if sep_id is None:
                sep_id = f"sep-{index}"
            elif not isinstance(sep_id, str):
                issues.append(ValidationIssue(f"{item_path}.id", "expected a string"))
                continue
            items.append(MenuItem(id=sep_id, label="", separator=True))
            continue
        item_id = _text(raw, "id", item_path, issues)
        item_label = raw.get("label", item_id)
        if not isinstance(item_label, str):
            issues.append(ValidationIssue(f"{item_path}.label", "expected a string"))
            item_label = item_id
        submenu = None
        raw_submenu = raw.get("submenu")
        if raw_submenu is not None:
            submenu = _parse_menu(raw_submenu, f"{item_path}.submenu", issues, stack, depth + 1)
        action_id = raw.get("action_id", raw.get("action"))
        if action_id is not None and not isinstance(action_id, str):
            issues.append(ValidationIssue(f"{item_path}.action_id", "expected a string or null"))
            action_id = None
        items.append(
            MenuItem(
                id=item_id,
                label=item_label,
                icon=_optional_text(raw, "icon", item_path, issues),
                action_id=action_id,
                submenu=submenu,
                shortcut=_optional_text(raw, "shortcut", item_path, issues),
            )
        )
    return MenuDescriptor(id=menu_id, label=label, items=tuple(items))


def _parse_compartment(
    data: Any,
    path: str,
    issues: List[ValidationIssue],
    stack: Set[int],
) -> Optional[CompartmentDescriptor]:
    if not isinstance(data, Mapping):
        issues.append(ValidationIssue(path, "compartment must be a mapping"))
        return None
    compartment_id = _text(data, "id", path, issues)
    title = data.get("title", compartment_id)
    if not isinstance(title, str):
        issues.append(ValidationIssue(f"{path}.title", "expected a string"))
        title = compartment_id
    raw_entries = data.get("entries", data.get("tools", []))
    if not isinstance(raw_entries, (list, tuple)):
        issues.append(ValidationIssue(f"{path}.entries", "expected a list"))
        raw_entries = []
    entries: List[ToolEntry] = []
    for index, raw in enumerate(raw_entries):
        entry_path = f"{path}.entries[{index}]"
        if not isinstance(raw, Mapping):
            issues.append(ValidationIssue(entry_path, "tool entry must be a mapping"))
            continue
        params = raw.get("params")
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            issues.append(ValidationIssue(f"{entry_path}.params", "expected a mapping"))
            params = {}
        entries.append(
            ToolEntry(
                id=_text(raw, "id", entry_path, issues),
                widget_kind=_text(raw, "widget_kind", entry_path, issues),
                params=params,
            )
        )
    return CompartmentDescriptor(id=compartment_id, title=title, entries=tuple(entries))
