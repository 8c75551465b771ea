"""
Mapping ORM avec SQLAlchemy (classical mapping).

La table est définie séparément et la classe Machine du domaine est
mappée dessus : le modèle reste ignorant de la persistance.
"""

from sqlalchemy import Column, Integer, MetaData, String, Table, inspect
from sqlalchemy.orm import registry

from inventory.domain import model

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

machines = Table(
    "machines",
    metadata,
    Column("id", String(255), primary_key=True),
    Column("stock_level", Integer, nullable=False),
)


def start_mappers() -> None:
    """
    Configure le mapping entre Machine et la table `machines`.

    Idempotent : un second appel ne remappe pas la classe.
    """
    if inspect(model.Machine, raiseerr=False) is not None:
        return
    mapper_registry.map_imperatively(model.Machine, machines)
