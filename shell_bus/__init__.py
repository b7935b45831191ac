"""Shell bus package: in-process notifications for composed-tree changes."""

from .bus import ShellBus
from . import topics
from .messages import MessageEnvelope

__all__ = ["ShellBus", "MessageEnvelope", "topics"]
