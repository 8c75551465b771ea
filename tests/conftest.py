"""
Configuration partagée pour les tests.

Le mapping ORM est démarré une seule fois pour toute la session de tests.
La base par défaut est une SQLite en mémoire : importer l'application
Flask ne crée aucun fichier.
"""

import os

os.environ.setdefault("INVENTORY_DATABASE_URI", "sqlite:///:memory:")

import pytest

from inventory.adapters import orm


@pytest.fixture(scope="session", autouse=True)
def mappers():
    """Démarre le mapping ORM une fois pour toute la session."""
    orm.start_mappers()
