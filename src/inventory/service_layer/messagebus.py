"""
Event Bus.

Le bus est le point central de dispatch des events vers les
subscribers qui s'y sont abonnés.

Fonctionnement :
1. Un event entre dans le bus
2. Le bus trouve les subscribers abonnés à son type (0 à N)
3. Chaque subscriber est appelé et peut retourner un event de suite
4. Les events de suite (cascade) sont délivrés à leur tour

Deux disciplines de dispatch des cascades :
- QUEUE : les events de suite sont ajoutés à une file (liste possédée
  par l'appelant) traitée en FIFO, donc en largeur d'abord
- EAGER : chaque event de suite est publié immédiatement, de manière
  récursive, donc en profondeur d'abord

Un subscriber qui lève une exception n'est pas isolé : l'erreur remonte
à l'appelant de publish().
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional

from inventory.domain import events

if TYPE_CHECKING:
    from inventory.service_layer.subscribers import AbstractSubscriber

logger = logging.getLogger(__name__)

DEFAULT_MAX_CASCADE = 1000
DEFAULT_MAX_DEPTH = 100


class Discipline(str, enum.Enum):
    QUEUE = "queue"
    EAGER = "eager"


class CascadeLimitExceeded(Exception):
    """Levée quand une cascade dépasse la borne configurée (boucle probable)."""
    pass


class EventBus:
    """
    Registre des abonnements et moteur de dispatch.

    Les abonnements sont des ensembles : s'abonner deux fois est sans
    effet, et aucun ordre n'est garanti entre subscribers d'un même type.
    """

    def __init__(
        self,
        discipline: Discipline | str = Discipline.QUEUE,
        max_cascade: int = DEFAULT_MAX_CASCADE,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.discipline = Discipline(discipline)
        self.max_cascade = max_cascade
        self.max_depth = max_depth
        self._subscribers: dict[str, set[AbstractSubscriber]] = {}
        self._delivered: Optional[list[events.EventLike]] = None
        self._cascaded: Optional[int] = None
        self._depth = 0

    # --- Abonnements ---

    def subscribe(self, event_type: str, subscriber: AbstractSubscriber) -> None:
        self._subscribers.setdefault(str(event_type), set()).add(subscriber)
        logger.debug("%r abonné à %s", subscriber, event_type)

    def unsubscribe(self, event_type: str, subscriber: AbstractSubscriber) -> None:
        subscribers = self._subscribers.get(str(event_type))
        if not subscribers or subscriber not in subscribers:
            return
        subscribers.discard(subscriber)
        if not subscribers:
            del self._subscribers[str(event_type)]
        logger.debug("%r désabonné de %s", subscriber, event_type)

    def subscriptions(self) -> dict[str, frozenset[AbstractSubscriber]]:
        """Instantané en lecture seule des abonnements courants."""
        return {
            event_type: frozenset(subscribers)
            for event_type, subscribers in self._subscribers.items()
        }

    # --- Dispatch ---

    def publish(
        self,
        event: events.EventLike,
        pending: Optional[list[events.EventLike]] = None,
    ) -> list[events.EventLike]:
        """
        Délivre un event à tous ses subscribers.

        Retourne les events de suite produits directement par cet event.
        En QUEUE, ils sont aussi ajoutés à `pending` (si fourni) pour être
        traités plus tard par l'appelant. En EAGER, chaque event de suite
        est publié dès que son subscriber le retourne, avant de passer au
        subscriber suivant.
        """
        if self._delivered is not None:
            self._delivered.append(event)

        subscribers = self._subscribers.get(str(event.type))
        if not subscribers:
            logger.debug("Aucun subscriber pour %s, event ignoré", event)
            return []

        follow_ups: list[events.EventLike] = []
        # Copie : un subscriber peut modifier les abonnements pendant le dispatch
        for subscriber in list(subscribers):
            logger.debug("Traitement de l'event %s avec %r", event, subscriber)
            new_event = subscriber.handle(event)
            if new_event is None:
                continue
            follow_ups.append(new_event)
            if self.discipline is Discipline.EAGER:
                self._publish_nested(new_event)

        if self.discipline is Discipline.QUEUE and pending is not None:
            pending.extend(follow_ups)
        return follow_ups

    def run(self, seed: Iterable[events.EventLike]) -> list[events.EventLike]:
        """
        Délivre les events initiaux et toute leur cascade, jusqu'à
        épuisement. Retourne le journal des events délivrés, dans
        l'ordre de délivrance.

        La borne `max_cascade` s'applique à la cascade de chaque event
        initial, pas au nombre d'events initiaux.
        """
        self._delivered = []
        try:
            if self.discipline is Discipline.QUEUE:
                self._run_queue(seed)
            else:
                for event in seed:
                    self._cascaded = 0
                    self.publish(event)
            return self._delivered
        finally:
            self._delivered = None
            self._cascaded = None

    def _run_queue(self, seed: Iterable[events.EventLike]) -> None:
        # Chaque event en attente garde l'index de l'event initial dont il découle
        pending = [(event, origin) for origin, event in enumerate(seed)]
        cascaded: dict[int, int] = {}
        while pending:
            event, origin = pending.pop(0)
            follow_ups = self.publish(event)
            if not follow_ups:
                continue
            cascaded[origin] = cascaded.get(origin, 0) + len(follow_ups)
            self._check_cascade(cascaded[origin], event)
            pending.extend((follow_up, origin) for follow_up in follow_ups)

    def _publish_nested(self, event: events.EventLike) -> None:
        if self._cascaded is not None:
            self._cascaded += 1
            self._check_cascade(self._cascaded, event)
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise CascadeLimitExceeded(
                    f"Profondeur de cascade supérieure à {self.max_depth}"
                )
            self.publish(event)
        finally:
            self._depth -= 1

    def _check_cascade(self, count: int, event: events.EventLike) -> None:
        if count > self.max_cascade:
            raise CascadeLimitExceeded(
                f"Plus de {self.max_cascade} events en cascade, dernier : {event}"
            )
