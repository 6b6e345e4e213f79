# app/modules/assistant/store.py
from abc import ABC, abstractmethod
from typing import Dict, Optional
import threading

from .flows import FlowState

class FlowStore(ABC):
    """Estado de conversación en curso, uno por dueño"""

    @abstractmethod
    def get(self, owner_id: int) -> Optional[FlowState]:
        ...

    @abstractmethod
    def save(self, owner_id: int, state: FlowState) -> None:
        ...

    @abstractmethod
    def clear(self, owner_id: int) -> None:
        ...

class InMemoryFlowStore(FlowStore):
    """Almacenamiento en memoria del proceso (se pierde al reiniciar)"""

    def __init__(self):
        self._states: Dict[int, FlowState] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: int) -> Optional[FlowState]:
        with self._lock:
            return self._states.get(owner_id)

    def save(self, owner_id: int, state: FlowState) -> None:
        with self._lock:
            self._states[owner_id] = state

    def clear(self, owner_id: int) -> None:
        with self._lock:
            self._states.pop(owner_id, None)

# Instancia global
flow_store = InMemoryFlowStore()

def get_flow_store() -> FlowStore:
    return flow_store
