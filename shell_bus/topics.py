"""Topic constants for the shell bus."""

# Interaction state
STATE_CHANGED = "shell.state.changed"

# Descriptors
DESCRIPTORS_SWAPPED = "shell.descriptors.swapped"

# Registry
REGISTRY_CHANGED = "shell.registry.changed"

# Teardown
SESSION_CLOSED = "shell.session.closed"

__all__ = [
    "STATE_CHANGED",
    "DESCRIPTORS_SWAPPED",
    "REGISTRY_CHANGED",
    "SESSION_CLOSED",
]
