"""
Driver : propriétaire du registre des machines et du bus.

Le driver est le seul à créer des machines. Il alimente le bus avec
un lot d'events initiaux et laisse le bus délivrer toute la cascade
jusqu'à épuisement : il n'y a pas de boucle serveur persistante.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from inventory.adapters import event_source
from inventory.domain import events, model
from inventory.service_layer import messagebus, unit_of_work

logger = logging.getLogger(__name__)

EventSource = Callable[[Sequence[str], int, Optional[random.Random]], Iterable[events.Event]]


class Driver:
    def __init__(
        self,
        bus: messagebus.EventBus,
        uow: unit_of_work.AbstractUnitOfWork,
        source: EventSource = event_source.random_events,
    ):
        self.bus = bus
        self.uow = uow
        self.source = source

    def add_machine(self, machine_id: str, stock_level: int = model.LOW_STOCK_THRESHOLD) -> None:
        """Enregistre une nouvelle machine. Lève ValueError si l'id existe déjà."""
        with self.uow:
            self.uow.machines.add(model.Machine(machine_id, stock_level))
            self.uow.commit()

    def ensure_machines(
        self,
        machine_ids: Iterable[str],
        stock_level: int = model.LOW_STOCK_THRESHOLD,
    ) -> None:
        """Enregistre les machines absentes du registre, sans toucher aux autres."""
        with self.uow:
            for machine_id in machine_ids:
                if self.uow.machines.get(machine_id) is None:
                    self.uow.machines.add(model.Machine(machine_id, stock_level))
            self.uow.commit()

    def machine_ids(self) -> list[str]:
        with self.uow:
            return [machine.id for machine in self.uow.machines.list()]

    def run(self, seed: Iterable[events.EventLike]) -> list[events.EventLike]:
        """
        Délivre les events et leur cascade, puis valide les niveaux de stock.

        Si la cascade échoue (subscriber en erreur, borne dépassée),
        rien n'est validé et l'exception remonte.
        """
        with self.uow:
            delivered = self.bus.run(seed)
            self.uow.commit()
        logger.info("%d events délivrés (%s)", len(delivered), self.bus.discipline.value)
        return delivered

    def simulate(self, count: int, rng: Optional[random.Random] = None) -> list[events.EventLike]:
        """Tire `count` events de la source et les délivre."""
        seed = list(self.source(self.machine_ids(), count, rng))
        return self.run(seed)

    def stock_levels(self) -> dict[str, int]:
        """Niveau de stock de chaque machine, par id."""
        with self.uow:
            return {machine.id: machine.stock_level for machine in self.uow.machines.list()}
