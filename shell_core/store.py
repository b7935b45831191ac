from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from .actions import (
    CLOSE_ALL_REASON,
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
    action_name,
)
from .descriptors import DialogRequest, DocumentRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InteractionState:
    active_menu_path: Tuple[str, ...] = ()
    expanded_compartment_ids: FrozenSet[str] = frozenset()
    open_documents: Tuple[DocumentRef, ...] = ()
    active_document_id: Optional[str] = None
    dialog_queue: Tuple[DialogRequest, ...] = ()

    def document(self, doc_id: Optional[str]) -> Optional[DocumentRef]:
        for ref in self.open_documents:
            if ref.id == doc_id:
                return ref
        return None

    @property
    def active_document(self) -> Optional[DocumentRef]:
        return self.document(self.active_document_id)

    @property
    def current_dialog(self) -> Optional[DialogRequest]:
        return self.dialog_queue[0] if self.dialog_queue else None


# A pending dialog callback: run after the new state is in place.
DialogDelivery = Tuple[DialogRequest, Any]
StateListener = Callable[[InteractionState, InteractionState, Any], None]


def reduce(state: InteractionState, action: Any) -> Tuple[InteractionState, List[DialogDelivery]]:
    """Pure transition. Unknown or malformed actions leave the state as is."""
    if isinstance(action, OpenMenu):
        path = _menu_path(action.path)
        if path is None:
            return state, []
        return replace(state, active_menu_path=path), []

    if isinstance(action, CloseMenu):
        if not state.active_menu_path:
            return state, []
        return replace(state, active_menu_path=()), []

    if isinstance(action, ToggleCompartment):
        if not isinstance(action.id, str):
            return state, []
        expanded = set(state.expanded_compartment_ids)
        if action.id in expanded:
            expanded.discard(action.id)
        else:
            expanded.add(action.id)
        return replace(state, expanded_compartment_ids=frozenset(expanded)), []

    if isinstance(action, OpenDocument):
        ref = action.ref
        if not isinstance(ref, DocumentRef):
            return state, []
        docs = state.open_documents
        if state.document(ref.id) is None:
            docs = docs + (ref,)
        active = state.active_document_id
        if action.activate or active is None:
            active = ref.id
        return replace(state, open_documents=docs, active_document_id=active), []

    if isinstance(action, ActivateDocument):
        if state.document(action.id) is None:
            return state, []
        return replace(state, active_document_id=action.id), []

    if isinstance(action, CloseDocument):
        return _close_document(state, action.id), []

    if isinstance(action, OpenDialog):
        request = action.request
        if not isinstance(request, DialogRequest):
            return state, []
        if any(queued.id == request.id for queued in state.dialog_queue):
            return state, []
        return replace(state, dialog_queue=state.dialog_queue + (request,)), []

    if isinstance(action, ResolveDialog):
        if not state.dialog_queue:
            return state, []
        head, rest = state.dialog_queue[0], state.dialog_queue[1:]
        return replace(state, dialog_queue=rest), [(head, action.result)]

    if isinstance(action, CloseAll):
        deliveries = [(request, Cancelled(CLOSE_ALL_REASON)) for request in state.dialog_queue]
        return InteractionState(), deliveries

    return state, []


def _menu_path(raw: Any) -> Optional[Tuple[str, ...]]:
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        return None
    if not all(isinstance(part, str) for part in raw):
        return None
    return tuple(raw)


def _close_document(state: InteractionState, doc_id: Any) -> InteractionState:
    docs = state.open_documents
    index = next((i for i, ref in enumerate(docs) if ref.id == doc_id), None)
    if index is None:
        return state
    remaining = docs[:index] + docs[index + 1:]
    active = state.active_document_id
    if active == doc_id:
        if not remaining:
            active = None
        else:
            active = remaining[min(index, len(remaining) - 1)].id
    return replace(state, open_documents=remaining, active_document_id=active)


class InteractionStore:
    """Owns the interaction state and applies actions to it."""

    def __init__(self, initial: Optional[InteractionState] = None) -> None:
        self._state = initial or InteractionState()
        self._listeners: Dict[str, StateListener] = {}

    @property
    def state(self) -> InteractionState:
        return self._state

    def dispatch(self, action: Any) -> InteractionState:
        previous = self._state
        try:
            next_state, deliveries = reduce(previous, action)
        except Exception:
            logger.exception("reducer failed on %s; state unchanged", action_name(action))
            return self._state
        self._state = next_state
        if next_state is not previous:
            logger.debug("dispatch %s", action_name(action))
            self._notify(previous, next_state, action)
        for request, result in deliveries:
            self._deliver(request, result)
        return self._state

    def subscribe(self, listener: StateListener) -> str:
        token = str(uuid.uuid4())
        self._listeners[token] = listener
        return token

    def unsubscribe(self, token: str) -> None:
        self._listeners.pop(token, None)

    def _notify(self, previous: InteractionState, current: InteractionState, action: Any) -> None:
        for listener in list(self._listeners.values()):
            try:
                listener(previous, current, action)
            except Exception:
                logger.exception("state listener failed after %s", action_name(action))

    def _deliver(self, request: DialogRequest, result: Any) -> None:
        if request.on_result is None:
            return
        try:
            request.on_result(result)
        except Exception:
            logger.exception("dialog callback failed for %s", request.id)
