"""
Configuration de l'application.

Les valeurs sont lues depuis l'environnement (préfixe INVENTORY_) ou
un fichier .env. Seuls le bootstrap et les points d'entrée lisent la
configuration ; le coeur reçoit des arguments explicites.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INVENTORY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    database_uri: str = "sqlite:///inventory.db"

    # Discipline de dispatch des cascades : "queue" (largeur) ou "eager" (profondeur)
    dispatch: Literal["queue", "eager"] = "queue"
    max_cascade: int = 1000

    # Machines créées au démarrage, séparées par des virgules
    machine_ids: str = "001,002,003"
    initial_stock: int = 3

    notifications: Literal["log", "email"] = "log"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    alert_recipient: str = "stock@example.com"
    alert_sender: str = "stock@example.com"

    log_level: str = "INFO"

    @property
    def machine_ids_list(self) -> list[str]:
        return [machine_id.strip() for machine_id in self.machine_ids.split(",") if machine_id.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
