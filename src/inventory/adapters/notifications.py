"""
Adapter pour les notifications.

Les subscribers de stock bas et de stock rétabli signalent l'état
d'une machine via cette abstraction, sans connaître le canal réel.
Le contenu du message est porté par une StockAlert.
"""

from __future__ import annotations

import abc
import logging
import smtplib
from dataclasses import dataclass

from inventory.domain.model import LOW_STOCK_THRESHOLD

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockAlert:
    """Alerte sur le niveau de stock d'une machine : `low` vrai si sous le seuil."""

    machine_id: str
    stock_level: int
    low: bool

    @property
    def subject(self) -> str:
        status = "Stock bas" if self.low else "Stock rétabli"
        return f"[{status}] Machine {self.machine_id}"

    @property
    def body(self) -> str:
        if self.low:
            return (
                f"La machine {self.machine_id} n'a plus que {self.stock_level} unité(s) "
                f"(seuil : {LOW_STOCK_THRESHOLD}). Réapprovisionnement de "
                f"{LOW_STOCK_THRESHOLD - self.stock_level} unité(s) commandé."
            )
        return (
            f"La machine {self.machine_id} est revenue à {self.stock_level} unité(s) "
            f"(seuil : {LOW_STOCK_THRESHOLD})."
        )


class AbstractNotifications(abc.ABC):
    """Interface abstraite pour les alertes de stock."""

    @abc.abstractmethod
    def send(self, destination: str, alert: StockAlert) -> None:
        raise NotImplementedError


class LoggingNotifications(AbstractNotifications):
    """Écrit les alertes dans les logs (canal par défaut)."""

    def send(self, destination: str, alert: StockAlert) -> None:
        level = logging.WARNING if alert.low else logging.INFO
        logger.log(level, "%s -> %s : %s", alert.subject, destination, alert.body)


class EmailNotifications(AbstractNotifications):
    """Envoie chaque alerte par email via SMTP."""

    def __init__(
        self,
        smtp_host: str = "localhost",
        smtp_port: int = 587,
        sender: str = "stock@example.com",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.sender = sender

    def send(self, destination: str, alert: StockAlert) -> None:
        msg = f"Subject: {alert.subject}\n\n{alert.body}"
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as smtp:
            smtp.sendmail(
                from_addr=self.sender,
                to_addrs=[destination],
                msg=msg.encode("utf-8"),
            )
