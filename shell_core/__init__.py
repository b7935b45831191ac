from .actions import (
    Accepted,
    ActivateDocument,
    Cancelled,
    CloseAll,
    CloseDocument,
    CloseMenu,
    OpenDialog,
    OpenDocument,
    OpenMenu,
    ResolveDialog,
    ToggleCompartment,
)
from .compose import Composer, compose
from .config import ShellConfig, load_shell_config
from .descriptors import (
    CompartmentDescriptor,
    DescriptorModel,
    DialogRequest,
    DocumentRef,
    MenuDescriptor,
    MenuItem,
    ToolEntry,
    model_from_dict,
)
from .errors import ConflictError, DescriptorValidationError, ResolutionMiss, ShellCoreError
from .registry import WidgetRegistry
from .session import Session, current_tree, dispatch, mount
from .store import InteractionState, InteractionStore
from .tree import WidgetNode, WidgetTree
from .validation import validate

__all__ = [
    "Accepted",
    "ActivateDocument",
    "Cancelled",
    "CloseAll",
    "CloseDocument",
    "CloseMenu",
    "OpenDialog",
    "OpenDocument",
    "OpenMenu",
    "ResolveDialog",
    "ToggleCompartment",
    "Composer",
    "compose",
    "ShellConfig",
    "load_shell_config",
    "CompartmentDescriptor",
    "DescriptorModel",
    "DialogRequest",
    "DocumentRef",
    "MenuDescriptor",
    "MenuItem",
    "ToolEntry",
    "model_from_dict",
    "ConflictError",
    "DescriptorValidationError",
    "ResolutionMiss",
    "ShellCoreError",
    "WidgetRegistry",
    "Session",
    "current_tree",
    "dispatch",
    "mount",
    "InteractionState",
    "InteractionStore",
    "WidgetNode",
    "WidgetTree",
    "validate",
]
