"""
Source d'events aléatoires.

Simule un producteur externe : une suite de ventes et de
réapprovisionnements tirés au hasard sur un ensemble de machines.
Le générateur aléatoire est injectable pour rendre les runs
reproductibles.
"""

from __future__ import annotations

import random
from collections.abc import Iterator, Sequence
from typing import Optional

from inventory.domain import events

SALE_QUANTITIES = (1, 2)
REFILL_QUANTITIES = (3, 5)


def random_event(machine_ids: Sequence[str], rng: random.Random) -> events.Event:
    """Une vente (1 ou 2 unités) ou un réapprovisionnement (3 ou 5), à 50/50."""
    machine_id = rng.choice(machine_ids)
    if rng.random() < 0.5:
        return events.Sale(machine_id=machine_id, quantity=rng.choice(SALE_QUANTITIES))
    return events.Refill(machine_id=machine_id, quantity=rng.choice(REFILL_QUANTITIES))


def random_events(
    machine_ids: Sequence[str],
    count: int,
    rng: Optional[random.Random] = None,
) -> Iterator[events.Event]:
    """Génère `count` events aléatoires visant les machines données."""
    if not machine_ids:
        raise ValueError("Aucune machine cible pour générer des events")
    rng = rng or random.Random()
    for _ in range(count):
        yield random_event(machine_ids, rng)
