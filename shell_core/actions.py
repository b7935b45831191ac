from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .descriptors import DialogRequest, DocumentRef


@dataclass(frozen=True)
class Accepted:
    """Dialog finished with a value."""

    value: Any = None


@dataclass(frozen=True)
class Cancelled:
    """Dialog dismissed without a value."""

    reason: Optional[str] = None


CLOSE_ALL_REASON = "close_all"


@dataclass(frozen=True)
class OpenMenu:
    path: Tuple[str, ...]


@dataclass(frozen=True)
class CloseMenu:
    pass


@dataclass(frozen=True)
class ToggleCompartment:
    id: str


@dataclass(frozen=True)
class OpenDocument:
    ref: DocumentRef
    activate: bool = True


@dataclass(frozen=True)
class ActivateDocument:
    id: str


@dataclass(frozen=True)
class CloseDocument:
    id: str


@dataclass(frozen=True)
class OpenDialog:
    request: DialogRequest


@dataclass(frozen=True)
class ResolveDialog:
    result: Any


@dataclass(frozen=True)
class CloseAll:
    pass


def action_name(action: Any) -> str:
    return type(action).__name__
