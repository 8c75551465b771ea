"""
Pattern Unit of Work.

Le Unit of Work (UoW) est la poignée sur le registre des machines que
le driver passe aux subscribers. Il délimite aussi la transaction d'un
run : les niveaux de stock ne sont persistés qu'au commit.

    with uow:
        bus.run(events)
        uow.commit()
"""

from __future__ import annotations

import abc

from sqlalchemy.orm import Session, sessionmaker

from inventory.adapters import repository


class AbstractUnitOfWork(abc.ABC):
    """
    Interface abstraite du Unit of Work.

    Fournit un repository `machines` et gère commit/rollback.
    Le rollback est automatique si commit() n'est pas appelé
    (grâce au __exit__ du context manager).
    """

    machines: repository.AbstractMachineRepository

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args: object) -> None:
        self.rollback()

    def commit(self) -> None:
        self._commit()

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Unit of Work en mémoire.

    Les machines sont modifiées en place. Un instantané des niveaux de
    stock est pris à l'entrée du context manager et à chaque commit ;
    le rollback y revient. `committed` sert aux assertions.
    """

    def __init__(self, machines: repository.InMemoryMachineRepository | None = None):
        self.machines = machines or repository.InMemoryMachineRepository()
        self.committed = False
        self._snapshot: dict[str, int] = self.machines.snapshot()

    def __enter__(self) -> InMemoryUnitOfWork:
        self._snapshot = self.machines.snapshot()
        return super().__enter__()

    def _commit(self) -> None:
        self._snapshot = self.machines.snapshot()
        self.committed = True

    def rollback(self) -> None:
        self.machines.restore(self._snapshot)


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Implémentation concrète du UoW avec SQLAlchemy.

    Crée une session à l'entrée du context manager,
    la ferme à la sortie. Rollback automatique si pas de commit.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session: Session = self.session_factory()
        self.machines = repository.SqlAlchemyMachineRepository(self.session)
        return super().__enter__()

    def __exit__(self, *args: object) -> None:
        super().__exit__(*args)
        self.session.close()

    def _commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
