"""
Tests end-to-end de la CLI de simulation.

La sortie peut contenir des lignes de log : on ne lit que les lignes
d'events ("sale 001 x2") et de stocks ("001 3").
"""

import re

from typer.testing import CliRunner

from inventory.entrypoints.cli import app

runner = CliRunner()

EVENT_LINE = re.compile(r"^(sale|refill|low_stock_warning|stock_level_ok) \S+( x-?\d+)?$", re.M)
STOCK_LINE = re.compile(r"^(\S+) (-?\d+)$", re.M)


def event_lines(output: str) -> list[str]:
    return [m.group(0) for m in EVENT_LINE.finditer(output)]


def stock_lines(output: str) -> dict[str, int]:
    stocks = output.rsplit("---", 1)[-1]
    return {m.group(1): int(m.group(2)) for m in STOCK_LINE.finditer(stocks)}


class TestSimulate:
    def test_affiche_les_events_et_les_stocks(self):
        result = runner.invoke(app, ["simulate", "--count", "5", "--seed", "1"])

        assert result.exit_code == 0
        assert "---" in result.output
        assert len(event_lines(result.output)) >= 5
        assert set(stock_lines(result.output)) == {"001", "002", "003"}

    def test_même_graine_même_résultat(self):
        first = runner.invoke(app, ["simulate", "-n", "8", "--seed", "12"])
        second = runner.invoke(app, ["simulate", "-n", "8", "--seed", "12"])

        assert event_lines(first.output) == event_lines(second.output)
        assert stock_lines(first.output) == stock_lines(second.output)

    def test_discipline_eager(self):
        result = runner.invoke(app, ["simulate", "-n", "3", "--seed", "4", "--discipline", "eager"])
        assert result.exit_code == 0

    def test_aucun_event(self):
        result = runner.invoke(app, ["simulate", "--count", "0"])

        assert result.exit_code == 0
        assert event_lines(result.output) == []
        assert stock_lines(result.output) == {"001": 3, "002": 3, "003": 3}


class TestSubscriptions:
    def test_liste_les_abonnements(self):
        result = runner.invoke(app, ["subscriptions"])

        assert result.exit_code == 0
        assert "sale: SaleSubscriber" in result.output
        assert "stock_level_ok: StockLevelOkSubscriber" in result.output
