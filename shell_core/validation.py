from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Set, TypeVar, Union

from .descriptors import MAX_MENU_DEPTH, CompartmentDescriptor, DescriptorModel, MenuDescriptor
from .errors import DescriptorValidationError, ValidationIssue

Descriptor = Union[DescriptorModel, MenuDescriptor, CompartmentDescriptor]
D = TypeVar("D", DescriptorModel, MenuDescriptor, CompartmentDescriptor)

# Widget node keys join ids with this character.
KEY_SEPARATOR = "/"


@dataclass
class ValidationResult:
    ok: bool
    descriptor_type: str
    errors: List[ValidationIssue]
    error_summary: str | None


def validate(descriptor: D) -> D:
    """Return the descriptor unchanged, or raise DescriptorValidationError."""
    issues = collect_issues(descriptor)
    if issues:
        raise DescriptorValidationError(issues)
    return descriptor


def check(descriptor: Any) -> ValidationResult:
    issues = collect_issues(descriptor)
    return ValidationResult(
        ok=not issues,
        descriptor_type=type(descriptor).__name__,
        errors=issues,
        error_summary=str(issues[0]) if issues else None,
    )


def collect_issues(descriptor: Any) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if isinstance(descriptor, DescriptorModel):
        _check_model(descriptor, issues)
    elif isinstance(descriptor, MenuDescriptor):
        _check_menu(descriptor, "$", issues, set())
    elif isinstance(descriptor, CompartmentDescriptor):
        _check_compartment(descriptor, "$", issues)
    else:
        issues.append(ValidationIssue("$", f"unsupported descriptor type: {type(descriptor).__name__}"))
    return issues


def _check_model(model: DescriptorModel, issues: List[ValidationIssue]) -> None:
    if not isinstance(model.menus, tuple):
        issues.append(ValidationIssue("$.menus", "expected a tuple of menus"))
    else:
        _check_unique((menu.id for menu in model.menus if isinstance(menu, MenuDescriptor)), "$.menus", issues)
        for index, menu in enumerate(model.menus):
            path = f"$.menus[{index}]"
            if not isinstance(menu, MenuDescriptor):
                issues.append(ValidationIssue(path, "expected a MenuDescriptor"))
                continue
            _check_menu(menu, path, issues, set())
    if not isinstance(model.compartments, tuple):
        issues.append(ValidationIssue("$.compartments", "expected a tuple of compartments"))
        return
    _check_unique(
        (c.id for c in model.compartments if isinstance(c, CompartmentDescriptor)),
        "$.compartments",
        issues,
    )
    for index, compartment in enumerate(model.compartments):
        path = f"$.compartments[{index}]"
        if not isinstance(compartment, CompartmentDescriptor):
            issues.append(ValidationIssue(path, "expected a CompartmentDescriptor"))
            continue
        _check_compartment(compartment, path, issues)


def _check_menu(
    menu: MenuDescriptor,
    path: str,
    issues: List[ValidationIssue],
    ancestors: Set[int],
    depth: int = 1,
) -> None:
    if depth > MAX_MENU_DEPTH:
        issues.append(ValidationIssue(path, f"submenus nest deeper than {MAX_MENU_DEPTH} levels"))
        return
    if id(menu) in ancestors:
        issues.append(ValidationIssue(path, f"submenu '{menu.id}' nests inside itself"))
        return
    ancestors = ancestors | {id(menu)}
    _check_id(menu.id, path, issues)
    _check_unique((item.id for item in menu.items), f"{path}.items", issues)
    for index, item in enumerate(menu.items):
        item_path = f"{path}.items[{index}]"
        _check_id(item.id, item_path, issues)
        if item.submenu is not None:
            if not isinstance(item.submenu, MenuDescriptor):
                issues.append(ValidationIssue(f"{item_path}.submenu", "expected a MenuDescriptor"))
                continue
            _check_menu(item.submenu, f"{item_path}.submenu", issues, ancestors, depth + 1)


def _check_compartment(compartment: CompartmentDescriptor, path: str, issues: List[ValidationIssue]) -> None:
    _check_id(compartment.id, path, issues)
    _check_unique((entry.id for entry in compartment.entries), f"{path}.entries", issues)
    for index, entry in enumerate(compartment.entries):
        entry_path = f"{path}.entries[{index}]"
        _check_id(entry.id, entry_path, issues)
        if not isinstance(entry.widget_kind, str) or not entry.widget_kind.strip():
            issues.append(ValidationIssue(f"{entry_path}.widget_kind", "widget kind must be a non-empty string"))
        if not isinstance(entry.params, Mapping):
            issues.append(ValidationIssue(f"{entry_path}.params", "params must be a mapping"))


def _check_id(value: Any, path: str, issues: List[ValidationIssue]) -> None:
    if not isinstance(value, str) or not value.strip():
        issues.append(ValidationIssue(f"{path}.id", "id must be a non-empty string"))
    elif KEY_SEPARATOR in value:
        issues.append(ValidationIssue(f"{path}.id", f"id must not contain '{KEY_SEPARATOR}'"))


def _check_unique(ids: Iterable[Any], path: str, issues: List[ValidationIssue]) -> None:
    seen: Set[Any] = set()
    for value in ids:
        if not isinstance(value, str):
            continue
        if value in seen:
            issues.append(ValidationIssue(path, f"duplicate sibling id '{value}'"))
        seen.add(value)
