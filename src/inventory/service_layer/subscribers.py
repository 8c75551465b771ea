"""
Subscribers du bus d'events.

Chaque subscriber est spécialisé sur une variante d'event. Il lit ou
modifie l'état des machines via le Unit of Work injecté à la
construction, et peut retourner un event de suite (cascade) que le bus
se charge de délivrer.

- Sale -> décrément du stock, éventuellement LowStockWarning
- Refill -> incrément du stock, éventuellement StockLevelOk
- LowStockWarning -> Refill correctif jusqu'au seuil
- StockLevelOk -> terminal, simple notification
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, ClassVar, Optional

from inventory.adapters.notifications import StockAlert
from inventory.domain import events
from inventory.domain.model import LOW_STOCK_THRESHOLD

if TYPE_CHECKING:
    from inventory.adapters.notifications import AbstractNotifications
    from inventory.domain.model import Machine
    from inventory.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

ALERT_RECIPIENT = "stock@example.com"


class AbstractSubscriber(abc.ABC):
    """
    Interface commune des subscribers.

    Template Method : handle() vérifie que l'event est bien de la
    variante attendue (`handles`) puis délègue à _handle(). Un event
    d'une autre variante est ignoré, sans erreur ni cascade.
    """

    handles: ClassVar[type[events.Event]]

    def __init__(self, uow: AbstractUnitOfWork):
        self.uow = uow

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"

    def handle(self, event: events.Event) -> Optional[events.Event]:
        if not isinstance(event, self.handles):
            logger.debug("%r ignore l'event %s", self, event)
            return None
        return self._handle(event)

    def _find_machine(self, machine_id: str) -> Machine | None:
        machine = self.uow.machines.get(machine_id)
        if machine is None:
            logger.debug("Machine inconnue %s, event ignoré", machine_id)
        return machine

    @abc.abstractmethod
    def _handle(self, event) -> Optional[events.Event]:
        raise NotImplementedError


class SaleSubscriber(AbstractSubscriber):
    handles = events.Sale

    def _handle(self, event: events.Sale) -> Optional[events.LowStockWarning]:
        machine = self._find_machine(event.machine_id)
        if machine is None:
            return None
        warning = machine.sell(event.quantity)
        logger.info(
            "Vente de %d sur %s, stock = %d",
            event.quantity, machine.id, machine.stock_level,
        )
        return warning


class RefillSubscriber(AbstractSubscriber):
    handles = events.Refill

    def _handle(self, event: events.Refill) -> Optional[events.StockLevelOk]:
        machine = self._find_machine(event.machine_id)
        if machine is None:
            return None
        ok = machine.refill(event.quantity)
        logger.info(
            "Réapprovisionnement de %d sur %s, stock = %d",
            event.quantity, machine.id, machine.stock_level,
        )
        return ok


class _NotifyingSubscriber(AbstractSubscriber):
    """Subscriber qui signale aussi l'event via l'adapter de notifications."""

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        notifications: AbstractNotifications | None = None,
        recipient: str = ALERT_RECIPIENT,
    ):
        super().__init__(uow)
        self.notifications = notifications
        self.recipient = recipient

    def _notify(self, machine: Machine, low: bool) -> None:
        if self.notifications is not None:
            alert = StockAlert(machine.id, machine.stock_level, low=low)
            self.notifications.send(destination=self.recipient, alert=alert)


class LowStockWarningSubscriber(_NotifyingSubscriber):
    """
    Action corrective : commande un Refill qui ramène le stock
    exactement au seuil (quantité = seuil - stock courant).

    Si le stock est déjà revenu au seuil ou au-dessus (warning périmé),
    la quantité calculée est <= 0 : aucun Refill n'est émis.
    """

    handles = events.LowStockWarning

    def _handle(self, event: events.LowStockWarning) -> Optional[events.Refill]:
        machine = self._find_machine(event.machine_id)
        if machine is None:
            return None
        quantity = machine.missing_quantity()
        if quantity <= 0:
            logger.debug(
                "Warning périmé pour %s (stock = %d), pas de réapprovisionnement",
                machine.id, machine.stock_level,
            )
            return None
        logger.warning(
            "Stock bas sur %s (%d < %d), réapprovisionnement de %d",
            machine.id, machine.stock_level, LOW_STOCK_THRESHOLD, quantity,
        )
        self._notify(machine, low=True)
        return events.Refill(machine_id=machine.id, quantity=quantity)


class StockLevelOkSubscriber(_NotifyingSubscriber):
    """Terminal : prend acte du retour au seuil, aucune cascade."""

    handles = events.StockLevelOk

    def _handle(self, event: events.StockLevelOk) -> None:
        machine = self._find_machine(event.machine_id)
        if machine is None:
            return None
        logger.info("Stock rétabli sur %s (stock = %d)", machine.id, machine.stock_level)
        self._notify(machine, low=False)
        return None
