"""
Bootstrap : assemblage de l'application (Composition Root).

Ce module construit le bus, abonne les quatre rôles de subscribers
à leur type d'event, puis remet le tout au driver. Tous les
abonnements sont faits avant la publication du premier event.

C'est le seul endroit de l'application qui connaît les
implémentations concrètes de chaque abstraction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from inventory import config
from inventory.adapters import notifications, orm
from inventory.domain.events import EventType
from inventory.service_layer import driver, messagebus, subscribers, unit_of_work


def bootstrap(
    start_orm: bool = False,
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    notifications_adapter: notifications.AbstractNotifications | None = None,
    discipline: messagebus.Discipline | str | None = None,
    settings: Optional[config.Settings] = None,
    seed_machines: bool = True,
) -> driver.Driver:
    """
    Construit et retourne un Driver configuré.

    Par défaut le registre est en mémoire. Avec start_orm=True, il est
    persisté via SQLAlchemy dans `settings.database_uri`. En test, on
    injecte des fakes via les paramètres.
    """
    settings = settings or config.get_settings()

    if uow is None:
        if start_orm:
            orm.start_mappers()
            uow = unit_of_work.SqlAlchemyUnitOfWork(_session_factory(settings.database_uri))
        else:
            uow = unit_of_work.InMemoryUnitOfWork()

    if notifications_adapter is None:
        notifications_adapter = _notifications(settings)

    bus = messagebus.EventBus(
        discipline=discipline or settings.dispatch,
        max_cascade=settings.max_cascade,
    )
    for event_type, event_subscribers in build_subscribers(
        uow, notifications_adapter, settings.alert_recipient
    ).items():
        for subscriber in event_subscribers:
            bus.subscribe(event_type, subscriber)

    stock_driver = driver.Driver(bus=bus, uow=uow)
    if seed_machines:
        stock_driver.ensure_machines(settings.machine_ids_list, settings.initial_stock)
    return stock_driver


def build_subscribers(
    uow: unit_of_work.AbstractUnitOfWork,
    notifications_adapter: notifications.AbstractNotifications,
    recipient: str = subscribers.ALERT_RECIPIENT,
) -> dict[EventType, list[subscribers.AbstractSubscriber]]:
    """Routage des types d'events vers leurs subscribers."""
    return {
        EventType.SALE: [subscribers.SaleSubscriber(uow)],
        EventType.REFILL: [subscribers.RefillSubscriber(uow)],
        EventType.LOW_STOCK_WARNING: [
            subscribers.LowStockWarningSubscriber(uow, notifications_adapter, recipient),
        ],
        EventType.STOCK_LEVEL_OK: [
            subscribers.StockLevelOkSubscriber(uow, notifications_adapter, recipient),
        ],
    }


def _session_factory(database_uri: str) -> sessionmaker:
    engine = create_engine(database_uri)
    orm.metadata.create_all(engine)
    return sessionmaker(bind=engine)


def _notifications(settings: config.Settings) -> notifications.AbstractNotifications:
    if settings.notifications == "email":
        return notifications.EmailNotifications(
            settings.smtp_host, settings.smtp_port, sender=settings.alert_sender
        )
    return notifications.LoggingNotifications()
