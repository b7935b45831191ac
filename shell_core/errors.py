from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence


class ShellCoreError(Exception):
    """Base class for composition engine errors."""


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class DescriptorValidationError(ShellCoreError):
    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues: List[ValidationIssue] = list(issues)
        summary = "; ".join(str(issue) for issue in self.issues[:3])
        if len(self.issues) > 3:
            summary += f" (+{len(self.issues) - 3} more)"
        super().__init__(f"invalid descriptor: {summary}")


class ConflictError(ShellCoreError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"widget kind already registered: {kind}")


class ParamsError(ShellCoreError):
    """Tool parameters do not fit the params type registered for a kind."""


# Error markers carried by placeholder nodes.
UNRESOLVED_KIND = "unresolved_kind"
INVALID_PARAMS = "invalid_params"
FACTORY_ERROR = "factory_error"


@dataclass(frozen=True)
class ResolutionMiss:
    """Why a slot was filled with a placeholder instead of a widget."""

    slot_key: str
    widget_kind: str
    reason: str
    detail: str = ""
