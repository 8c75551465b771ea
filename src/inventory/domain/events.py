"""
Events du domaine.

Les events représentent des faits qui se sont produits sur une machine
(vente, réapprovisionnement) ou une condition dérivée (stock bas,
stock rétabli). Ils sont immuables et portent un tag de type qui sert
de clé de routage dans le bus.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Protocol


class EventType(str, enum.Enum):
    """
    Tag de type d'un event.

    Hérite de str : EventType.SALE == "sale", ce qui permet de
    s'abonner indifféremment avec le tag ou sa valeur texte.
    """

    SALE = "sale"
    REFILL = "refill"
    LOW_STOCK_WARNING = "low_stock_warning"
    STOCK_LEVEL_OK = "stock_level_ok"

    def __str__(self) -> str:
        return self.value


class EventLike(Protocol):
    """Forme minimale attendue d'un event venant d'un producteur externe."""

    @property
    def type(self) -> str: ...

    @property
    def machine_id(self) -> str: ...


class Event:
    """Classe de base pour tous les events du domaine."""

    type: ClassVar[EventType]
    machine_id: str


@dataclass(frozen=True)
class Sale(Event):
    """Des unités ont été vendues par une machine."""

    type: ClassVar[EventType] = EventType.SALE

    machine_id: str
    quantity: int


@dataclass(frozen=True)
class Refill(Event):
    """Une machine a été réapprovisionnée."""

    type: ClassVar[EventType] = EventType.REFILL

    machine_id: str
    quantity: int


@dataclass(frozen=True)
class LowStockWarning(Event):
    """Le stock d'une machine vient de passer sous le seuil."""

    type: ClassVar[EventType] = EventType.LOW_STOCK_WARNING

    machine_id: str


@dataclass(frozen=True)
class StockLevelOk(Event):
    """Le stock d'une machine vient de repasser au-dessus du seuil."""

    type: ClassVar[EventType] = EventType.STOCK_LEVEL_OK

    machine_id: str


EVENT_CLASSES: dict[EventType, type[Event]] = {
    EventType.SALE: Sale,
    EventType.REFILL: Refill,
    EventType.LOW_STOCK_WARNING: LowStockWarning,
    EventType.STOCK_LEVEL_OK: StockLevelOk,
}


def from_dict(data: dict) -> Event:
    """
    Construit un event à partir d'un dictionnaire (JSON d'une requête).

    Lève ValueError si le type est inconnu, KeyError si un champ manque.
    """
    event_type = EventType(data["type"])
    event_class = EVENT_CLASSES[event_type]
    if event_class in (Sale, Refill):
        return event_class(machine_id=str(data["machine_id"]), quantity=int(data["quantity"]))
    return event_class(machine_id=str(data["machine_id"]))


def to_dict(event: Event) -> dict:
    """Sérialise un event en dictionnaire (pour les réponses HTTP)."""
    data = {"type": str(event.type), "machine_id": event.machine_id}
    quantity = getattr(event, "quantity", None)
    if quantity is not None:
        data["quantity"] = quantity
    return data
