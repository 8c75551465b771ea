"""
Tests des adapters de notifications.

Le SMTP est remplacé par un faux serveur qui capture les messages.
"""

from __future__ import annotations

import logging

from inventory.adapters import notifications
from inventory.adapters.notifications import StockAlert


class FakeSMTP:
    sent: list = []

    def __init__(self, host, port):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return None

    def sendmail(self, from_addr, to_addrs, msg):
        FakeSMTP.sent.append((from_addr, to_addrs, msg.decode("utf-8")))


class TestStockAlert:
    def test_alerte_de_stock_bas(self):
        alert = StockAlert("042", 1, low=True)

        assert alert.subject == "[Stock bas] Machine 042"
        assert "042" in alert.body
        assert "1 unité(s)" in alert.body
        assert "Réapprovisionnement de 2 unité(s)" in alert.body

    def test_alerte_de_stock_rétabli(self):
        alert = StockAlert("042", 3, low=False)

        assert alert.subject == "[Stock rétabli] Machine 042"
        assert "revenue à 3 unité(s)" in alert.body


class TestEmailNotifications:
    def test_envoie_le_sujet_et_le_niveau_de_stock(self, monkeypatch):
        FakeSMTP.sent = []
        monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)
        adapter = notifications.EmailNotifications(sender="machines@example.com")

        adapter.send("stock@example.com", StockAlert("042", 0, low=True))

        ((from_addr, to_addrs, msg),) = FakeSMTP.sent
        assert from_addr == "machines@example.com"
        assert to_addrs == ["stock@example.com"]
        assert msg.startswith("Subject: [Stock bas] Machine 042\n\n")
        assert "0 unité(s)" in msg


class TestLoggingNotifications:
    def test_stock_bas_en_warning(self, caplog):
        with caplog.at_level(logging.INFO, logger=notifications.__name__):
            notifications.LoggingNotifications().send("stock@example.com", StockAlert("042", 1, low=True))

        (record,) = caplog.records
        assert record.levelno == logging.WARNING
        assert "Machine 042" in record.getMessage()

    def test_stock_rétabli_en_info(self, caplog):
        with caplog.at_level(logging.INFO, logger=notifications.__name__):
            notifications.LoggingNotifications().send("stock@example.com", StockAlert("042", 3, low=False))

        (record,) = caplog.records
        assert record.levelno == logging.INFO
