from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import ConflictError, ParamsError

logger = logging.getLogger(__name__)

WidgetFactory = Callable[[Any], Any]
RegistryListener = Callable[[str, str], None]

REGISTERED = "registered"
UNREGISTERED = "unregistered"


@dataclass(frozen=True)
class KindEntry:
    kind: str
    factory: WidgetFactory
    params_type: Optional[type] = None

    def same_as(self, factory: WidgetFactory, params_type: Optional[type]) -> bool:
        return self.factory == factory and self.params_type is params_type


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of the registry used for one composition pass."""

    version: int
    entries: Mapping[str, KindEntry]

    def resolve(self, kind: str) -> Optional[WidgetFactory]:
        entry = self.entries.get(kind)
        return entry.factory if entry else None

    def entry(self, kind: str) -> Optional[KindEntry]:
        return self.entries.get(kind)

    def build_params(self, kind: str, raw: Mapping[str, Any]) -> Any:
        entry = self.entries.get(kind)
        params_type = entry.params_type if entry else None
        return build_params(params_type, raw)


def build_params(params_type: Optional[type], raw: Mapping[str, Any]) -> Any:
    if not isinstance(raw, Mapping):
        raise ParamsError(f"params must be a mapping, got {type(raw).__name__}")
    if params_type is None:
        return MappingProxyType(dict(raw))
    known = {f.name for f in dataclasses.fields(params_type) if f.init}
    unknown = sorted(str(key) for key in raw if key not in known)
    if unknown:
        raise ParamsError(f"unknown params for {params_type.__name__}: {', '.join(unknown)}")
    try:
        return params_type(**raw)
    except (TypeError, ValueError) as exc:
        raise ParamsError(f"{params_type.__name__}: {exc}") from exc


class WidgetRegistry:
    """Maps widget kinds to factories; one instance per shell."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: Dict[str, KindEntry] = {}
        self._version = 0
        self._listeners: List[RegistryListener] = []

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def register(
        self,
        kind: str,
        factory: WidgetFactory,
        params_type: Optional[type] = None,
    ) -> None:
        if not isinstance(kind, str) or not kind.strip():
            raise ValueError("widget kind must be a non-empty string")
        if not callable(factory):
            raise TypeError(f"factory for '{kind}' is not callable")
        if params_type is not None and not (
            isinstance(params_type, type) and dataclasses.is_dataclass(params_type)
        ):
            raise TypeError(f"params type for '{kind}' must be a dataclass type")
        with self._lock:
            existing = self._entries.get(kind)
            if existing is not None:
                if existing.same_as(factory, params_type):
                    return
                logger.warning("widget kind conflict: %s", kind)
                raise ConflictError(kind)
            self._entries[kind] = KindEntry(kind=kind, factory=factory, params_type=params_type)
            self._version += 1
        logger.debug("registered widget kind %s", kind)
        self._notify(kind, REGISTERED)

    def unregister(self, kind: str) -> bool:
        with self._lock:
            if self._entries.pop(kind, None) is None:
                return False
            self._version += 1
        logger.debug("unregistered widget kind %s", kind)
        self._notify(kind, UNREGISTERED)
        return True

    def resolve(self, kind: str) -> Optional[WidgetFactory]:
        with self._lock:
            entry = self._entries.get(kind)
        return entry.factory if entry else None

    def kinds(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def build_params(self, kind: str, raw: Mapping[str, Any]) -> Any:
        return self.snapshot().build_params(kind, raw)

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                version=self._version,
                entries=MappingProxyType(dict(self._entries)),
            )

    def add_listener(self, listener: RegistryListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: RegistryListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def __contains__(self, kind: object) -> bool:
        with self._lock:
            return kind in self._entries

    def _notify(self, kind: str, change: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(kind, change)
            except Exception:
                logger.exception("registry listener failed for %s", kind)
