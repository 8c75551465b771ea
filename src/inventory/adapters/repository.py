"""
Pattern Repository : le registre des machines.

Le repository expose une interface de type collection (add, get, list)
qui masque le stockage réel : un dictionnaire en mémoire pour le coeur
et les tests, ou une base SQL via SQLAlchemy.

Seul le driver ajoute des machines ; les subscribers se contentent
de les lire et de modifier leur niveau de stock.
"""

from __future__ import annotations

import abc

from sqlalchemy.orm import Session

from inventory.domain import model


class AbstractMachineRepository(abc.ABC):
    """
    Interface abstraite du registre des machines.

    Template Method : les méthodes publiques délèguent aux méthodes
    abstraites préfixées _ que les sous-classes implémentent.
    """

    def add(self, machine: model.Machine) -> None:
        """Ajoute une machine. Lève ValueError si l'id existe déjà."""
        if self._get(machine.id) is not None:
            raise ValueError(f"Machine déjà enregistrée : {machine.id}")
        self._add(machine)

    def get(self, machine_id: str) -> model.Machine | None:
        """Retourne la machine d'id donné, ou None si elle n'existe pas."""
        return self._get(machine_id)

    def list(self) -> list[model.Machine]:
        """Toutes les machines, triées par id."""
        return sorted(self._list(), key=lambda m: m.id)

    @abc.abstractmethod
    def _add(self, machine: model.Machine) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, machine_id: str) -> model.Machine | None:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self) -> list[model.Machine]:
        raise NotImplementedError


class InMemoryMachineRepository(AbstractMachineRepository):
    """Registre en mémoire : un dictionnaire id -> Machine."""

    def __init__(self, machines: list[model.Machine] | None = None):
        self._machines: dict[str, model.Machine] = {}
        for machine in machines or []:
            self.add(machine)

    def _add(self, machine: model.Machine) -> None:
        self._machines[machine.id] = machine

    def _get(self, machine_id: str) -> model.Machine | None:
        return self._machines.get(machine_id)

    def _list(self) -> list[model.Machine]:
        return list(self._machines.values())

    def snapshot(self) -> dict[str, int]:
        """Niveau de stock de chaque machine, pour un rollback ultérieur."""
        return {machine_id: m.stock_level for machine_id, m in self._machines.items()}

    def restore(self, snapshot: dict[str, int]) -> None:
        """Remet le registre dans l'état de `snapshot` (machines ajoutées depuis comprises)."""
        for machine_id in list(self._machines):
            if machine_id not in snapshot:
                del self._machines[machine_id]
        for machine_id, stock_level in snapshot.items():
            self._machines[machine_id].stock_level = stock_level


class SqlAlchemyMachineRepository(AbstractMachineRepository):
    """Implémentation concrète du registre avec SQLAlchemy."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, machine: model.Machine) -> None:
        self.session.add(machine)

    def _get(self, machine_id: str) -> model.Machine | None:
        return self.session.get(model.Machine, machine_id)

    def _list(self) -> list[model.Machine]:
        return self.session.query(model.Machine).all()
