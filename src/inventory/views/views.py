"""
Views (lecture).

Fonctions de lecture pure : elles interrogent le registre et le bus
sans rien modifier. Utilisées par les points d'entrée pour le
diagnostic et les assertions après un run.
"""

from __future__ import annotations

from inventory.service_layer import messagebus, unit_of_work


def stock_levels(uow: unit_of_work.AbstractUnitOfWork) -> list[dict]:
    """Niveau de stock de chaque machine, trié par id."""
    with uow:
        return [
            {"id": machine.id, "stock_level": machine.stock_level}
            for machine in uow.machines.list()
        ]


def machine(machine_id: str, uow: unit_of_work.AbstractUnitOfWork) -> dict | None:
    with uow:
        found = uow.machines.get(machine_id)
        if found is None:
            return None
        return {"id": found.id, "stock_level": found.stock_level}


def subscriptions(bus: messagebus.EventBus) -> dict[str, list[str]]:
    """Noms des classes de subscribers abonnées, par type d'event."""
    return {
        event_type: sorted(type(subscriber).__name__ for subscriber in subscribers)
        for event_type, subscribers in sorted(bus.subscriptions().items())
    }
