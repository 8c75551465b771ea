"""
Tests du driver et de la source d'events aléatoires.
"""

from __future__ import annotations

import random

import pytest

from inventory.adapters import event_source
from inventory.config import Settings
from inventory.domain import events
from inventory.domain.events import EventType
from inventory.domain.model import Machine
from inventory.service_layer import bootstrap, messagebus, unit_of_work


def make_driver(**settings):
    return bootstrap.bootstrap(
        uow=unit_of_work.InMemoryUnitOfWork(),
        settings=Settings(**settings),
    )


class TestBootstrap:
    def test_les_quatre_rôles_sont_abonnés(self):
        stock_driver = make_driver()

        subscriptions = stock_driver.bus.subscriptions()

        assert set(subscriptions) == {str(t) for t in EventType}
        assert all(len(subscribers) == 1 for subscribers in subscriptions.values())

    def test_machines_par_défaut(self):
        stock_driver = make_driver()
        assert stock_driver.stock_levels() == {"001": 3, "002": 3, "003": 3}

    def test_machines_configurées(self):
        stock_driver = make_driver(machine_ids="a, b", initial_stock=10)
        assert stock_driver.stock_levels() == {"a": 10, "b": 10}

    def test_discipline_configurée(self):
        assert make_driver(dispatch="eager").bus.discipline.value == "eager"


class TestDriver:
    def test_add_machine_refuse_un_doublon(self):
        stock_driver = make_driver()
        with pytest.raises(ValueError):
            stock_driver.add_machine("001")

    def test_ensure_machines_ne_touche_pas_aux_existantes(self):
        stock_driver = make_driver()
        stock_driver.run([events.Sale("001", 1)])

        stock_driver.ensure_machines(["001", "004"], stock_level=7)

        assert stock_driver.stock_levels() == {"001": 2, "002": 3, "003": 3, "004": 7}

    def test_run_valide_le_unit_of_work(self):
        stock_driver = make_driver()
        stock_driver.uow.committed = False

        stock_driver.run([events.Sale("001", 1)])

        assert stock_driver.uow.committed

    def test_simulate_est_reproductible(self):
        first, second = make_driver(), make_driver()

        delivered_1 = first.simulate(20, rng=random.Random(42))
        delivered_2 = second.simulate(20, rng=random.Random(42))

        assert delivered_1 == delivered_2
        assert first.stock_levels() == second.stock_levels()

    def test_simulate_avec_une_source_injectée(self):
        def scripted(machine_ids, count, rng):
            return [events.Sale(machine_ids[0], 2)] * count

        stock_driver = make_driver()
        stock_driver.source = scripted

        delivered = stock_driver.simulate(1)

        assert [type(e) for e in delivered] == [
            events.Sale, events.LowStockWarning, events.Refill, events.StockLevelOk,
        ]
        assert stock_driver.stock_levels()["001"] == 3


class TestEventSource:
    def test_génère_le_nombre_demandé(self):
        generated = list(event_source.random_events(["001"], 10, random.Random(1)))
        assert len(generated) == 10

    def test_quantités_et_cibles(self):
        generated = list(event_source.random_events(["001", "002"], 200, random.Random(7)))

        for event in generated:
            assert event.machine_id in {"001", "002"}
            if isinstance(event, events.Sale):
                assert event.quantity in event_source.SALE_QUANTITIES
            else:
                assert isinstance(event, events.Refill)
                assert event.quantity in event_source.REFILL_QUANTITIES
        assert {type(e) for e in generated} == {events.Sale, events.Refill}

    def test_sans_machine(self):
        with pytest.raises(ValueError):
            list(event_source.random_events([], 1))


class FailingSubscriber:
    def handle(self, event):
        raise RuntimeError("subscriber en panne")


class TestRollback:
    def test_un_run_en_échec_ne_valide_aucun_niveau_de_stock(self):
        stock_driver = make_driver()
        stock_driver.bus.subscribe("low_stock_warning", FailingSubscriber())

        with pytest.raises(RuntimeError, match="en panne"):
            stock_driver.run([events.Refill("002", 5), events.Sale("001", 2)])

        assert stock_driver.stock_levels() == {"001": 3, "002": 3, "003": 3}

    def test_borne_dépassée_en_cours_de_run(self):
        stock_driver = make_driver(max_cascade=1)

        with pytest.raises(messagebus.CascadeLimitExceeded):
            stock_driver.run([events.Sale("003", 1), events.Sale("001", 2)])

        assert stock_driver.stock_levels() == {"001": 3, "002": 3, "003": 3}

    def test_le_run_précédent_validé_est_conservé(self):
        stock_driver = make_driver()
        stock_driver.run([events.Refill("001", 5)])
        stock_driver.bus.subscribe("sale", FailingSubscriber())

        with pytest.raises(RuntimeError):
            stock_driver.run([events.Sale("001", 1)])

        assert stock_driver.stock_levels()["001"] == 8

    def test_sans_commit_le_unit_of_work_revient_à_l_instantané(self):
        uow = unit_of_work.InMemoryUnitOfWork()
        uow.machines.add(Machine("m1", 3))

        with uow:
            uow.machines.get("m1").sell(2)
            uow.machines.add(Machine("m2", 5))

        assert [(m.id, m.stock_level) for m in uow.machines.list()] == [("m1", 3)]

    def test_une_simulation_de_mille_events_aboutit(self):
        stock_driver = make_driver()

        delivered = stock_driver.simulate(1000, rng=random.Random(1))

        assert len(delivered) >= 1000
