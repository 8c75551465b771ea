"""
Modèle de domaine pour le contrôle de stock.

Une Machine détient un niveau de stock. Les ventes le diminuent, les
réapprovisionnements l'augmentent. Le franchissement du seuil de stock
bas (dans un sens ou dans l'autre) produit un event dérivé.
"""

from __future__ import annotations

from typing import Optional

from inventory.domain import events

LOW_STOCK_THRESHOLD = 3


class Machine:
    """
    Entité représentant une machine de distribution.

    L'identité est portée par `id` (immuable après création) ; l'égalité
    et le hash en dépendent, pas du niveau de stock. Le niveau de stock
    peut devenir négatif : aucun plafonnement n'est appliqué.
    """

    def __init__(self, id: str, stock_level: int = LOW_STOCK_THRESHOLD):
        self.id = id
        self.stock_level = stock_level

    def __repr__(self) -> str:
        return f"<Machine {self.id} stock={self.stock_level}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Machine):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_low(self) -> bool:
        return self.stock_level < LOW_STOCK_THRESHOLD

    def sell(self, quantity: int) -> Optional[events.LowStockWarning]:
        """
        Retire `quantity` unités du stock.

        Retourne un LowStockWarning uniquement si le stock franchit le
        seuil vers le bas (>= 3 avant, < 3 après).
        """
        was_low = self.is_low
        self.stock_level -= quantity
        if self.is_low and not was_low:
            return events.LowStockWarning(machine_id=self.id)
        return None

    def refill(self, quantity: int) -> Optional[events.StockLevelOk]:
        """
        Ajoute `quantity` unités au stock.

        Retourne un StockLevelOk uniquement si le stock franchit le
        seuil vers le haut (< 3 avant, >= 3 après).
        """
        was_low = self.is_low
        self.stock_level += quantity
        if was_low and not self.is_low:
            return events.StockLevelOk(machine_id=self.id)
        return None

    def missing_quantity(self) -> int:
        """Quantité nécessaire pour ramener le stock exactement au seuil."""
        return LOW_STOCK_THRESHOLD - self.stock_level
