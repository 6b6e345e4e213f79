# app/modules/assistant/intents.py
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Pattern, Tuple
import re

class Intent(str, Enum):
    ADD_COLLABORATOR = "add_collaborator"
    DELETE_COLLABORATOR = "delete_collaborator"
    ADD_PRODUCT = "add_product"
    DELETE_PRODUCT = "delete_product"
    LIST_INVENTORY = "list_inventory"
    RECORD_SALE = "record_sale"
    LIST_PAYMENTS = "list_payments"
    RECORD_PAYMENT = "record_payment"
    CANCEL = "cancel"
    UNKNOWN = "unknown"

class IntentMatcher(ABC):
    """Clasifica un mensaje libre en una intención cerrada"""

    @abstractmethod
    def match(self, message: str) -> Intent:
        ...

class RegexIntentMatcher(IntentMatcher):
    """Clasificador por expresiones regulares; gana el primer patrón que coincide"""

    PATTERNS: List[Tuple[Intent, str]] = [
        (Intent.CANCEL, r"^\s*cancelar\s*$"),
        (Intent.ADD_COLLABORATOR, r"(agregar|registrar|añadir|sumar).*colaborador"),
        (Intent.DELETE_COLLABORATOR, r"(eliminar|borrar|suprimir|quitar).*colaborador"),
        (Intent.RECORD_PAYMENT, r"(agregar|registrar|añadir|sumar).*cobro"),
        (Intent.LIST_PAYMENTS, r"(consultar|mostrar|ver|verificar|qu[eé]).*cobros?"),
        (Intent.ADD_PRODUCT, r"(agregar|añadir|sumar|incorporar).*producto"),
        (Intent.DELETE_PRODUCT, r"(eliminar|borrar|suprimir|quitar).*producto"),
        (Intent.LIST_INVENTORY,
         r"(inventario|productos\s+disponibles|existencias|art[ií]culos\s+en\s+stock|qu[eé]\s+tenemos)"),
        (Intent.RECORD_SALE, r"(vender|registrar|realizar|hacer|agregar).*venta"),
    ]

    def __init__(self):
        self._compiled: List[Tuple[Intent, Pattern]] = [
            (intent, re.compile(pattern, re.IGNORECASE)) for intent, pattern in self.PATTERNS
        ]

    def match(self, message: str) -> Intent:
        text = (message or "").strip()
        for intent, pattern in self._compiled:
            if pattern.search(text):
                return intent
        return Intent.UNKNOWN
