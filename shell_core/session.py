from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, Union

from shell_bus import ShellBus, topics

from .actions import action_name
from .compose import Composer
from .config import ShellConfig
from .descriptors import DescriptorModel, model_from_dict
from .registry import WidgetRegistry
from .store import InteractionState, InteractionStore
from .tree import WidgetNode
from .validation import validate

logger = logging.getLogger(__name__)

_SOURCE = "shell_core.session"

ModelInput = Union[DescriptorModel, Mapping[str, Any]]


class DocumentSource(Protocol):
    def get_content(self, handle: Any) -> Any:
        ...


def _as_model(model: ModelInput) -> DescriptorModel:
    if isinstance(model, DescriptorModel):
        return validate(model)
    return validate(model_from_dict(model))


class Session:
    """Binds a descriptor model, a store and a composer for one shell."""

    def __init__(
        self,
        model: ModelInput,
        initial_state: Optional[InteractionState] = None,
        *,
        registry: Optional[WidgetRegistry] = None,
        config: Optional[ShellConfig] = None,
        document_source: Optional[DocumentSource] = None,
        bus: Optional[ShellBus] = None,
    ) -> None:
        self._model = _as_model(model)
        self.registry = registry if registry is not None else WidgetRegistry()
        self.bus = bus if bus is not None else ShellBus()
        self.store = InteractionStore(initial_state)
        self._composer = Composer(self.registry, config)
        self._document_source = document_source
        self._tree: Optional[WidgetNode] = None
        self._tree_inputs: Optional[tuple] = None
        self._closed = False
        self._store_token = self.store.subscribe(self._on_state_changed)
        self.registry.add_listener(self._on_registry_changed)

    @property
    def model(self) -> DescriptorModel:
        return self._model

    @property
    def state(self) -> InteractionState:
        return self.store.state

    @property
    def config(self) -> ShellConfig:
        return self._composer.config

    @property
    def composer(self) -> Composer:
        return self._composer

    def current_tree(self) -> WidgetNode:
        inputs = (self._model, self.store.state, self.registry.version)
        if self._tree is None or not _same_inputs(inputs, self._tree_inputs):
            self._tree = self._composer.compose(self._model, self.store.state)
            self._tree_inputs = inputs
        return self._tree

    def dispatch(self, action: Any) -> InteractionState:
        return self.store.dispatch(action)

    def swap_descriptors(self, model: ModelInput) -> None:
        self._model = _as_model(model)
        self._composer.reset()
        self._tree = None
        logger.info("descriptor model swapped")
        self.bus.publish(topics.DESCRIPTORS_SWAPPED, {}, source=_SOURCE)

    def document_content(self, doc_id: str) -> Any:
        ref = self.store.state.document(doc_id)
        if ref is None:
            raise KeyError(f"document not open: {doc_id}")
        if self._document_source is None:
            raise LookupError("no document source attached to this session")
        return self._document_source.get_content(ref.content_handle)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.store.unsubscribe(self._store_token)
        self.registry.remove_listener(self._on_registry_changed)
        self.bus.publish(topics.SESSION_CLOSED, {}, source=_SOURCE)

    def _on_state_changed(self, previous: InteractionState, current: InteractionState, action: Any) -> None:
        self.bus.publish(topics.STATE_CHANGED, {"action": action_name(action)}, source=_SOURCE)

    def _on_registry_changed(self, kind: str, change: str) -> None:
        self.bus.publish(topics.REGISTRY_CHANGED, {"kind": kind, "change": change}, source=_SOURCE)


def _same_inputs(a: tuple, b: Optional[tuple]) -> bool:
    if b is None:
        return False
    return a[0] is b[0] and a[1] is b[1] and a[2] == b[2]


def mount(
    model: ModelInput,
    initial_state: Optional[InteractionState] = None,
    **kwargs: Any,
) -> Session:
    session = Session(model, initial_state, **kwargs)
    logger.info(
        "shell mounted: %d menus, %d compartments",
        len(session.model.menus),
        len(session.model.compartments),
    )
    return session


def current_tree(session: Session) -> WidgetNode:
    return session.current_tree()


def dispatch(session: Session, action: Any) -> InteractionState:
    return session.dispatch(action)
