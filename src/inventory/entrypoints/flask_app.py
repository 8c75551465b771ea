"""
Point d'entrée Flask.

L'API Flask est un thin adapter : elle convertit les requêtes HTTP en
events, les fait délivrer par le driver, et convertit les résultats
en réponses HTTP.

L'API ne contient aucune logique métier.
"""

from __future__ import annotations

import logging
import random

from flask import Flask, jsonify, request

from inventory import config
from inventory.domain import events
from inventory.service_layer import bootstrap, messagebus
from inventory.views import views

logging.basicConfig(level=config.get_settings().log_level)

app = Flask(__name__)
driver = bootstrap.bootstrap(start_orm=True)


@app.route("/events", methods=["POST"])
def publish_event_endpoint():
    """
    POST /events
    Body JSON : { type, machine_id, quantity? }

    Délivre l'event et sa cascade. Retourne les events délivrés.
    """
    data = request.json
    try:
        event = events.from_dict(data)
    except (KeyError, ValueError, TypeError) as e:
        return jsonify({"message": f"Event invalide : {e}"}), 400

    try:
        delivered = driver.run([event])
    except messagebus.CascadeLimitExceeded as e:
        return jsonify({"message": str(e)}), 400
    return jsonify({"delivered": [events.to_dict(e) for e in delivered]}), 201


@app.route("/simulate", methods=["POST"])
def simulate_endpoint():
    """
    POST /simulate
    Body JSON : { count?, seed? }

    Délivre `count` events aléatoires (5 par défaut).
    """
    data = request.get_json(silent=True) or {}
    count = data.get("count", 5)
    if not isinstance(count, int) or count < 0:
        return jsonify({"message": "count doit être un entier positif"}), 400
    rng = random.Random(data["seed"]) if "seed" in data else None

    try:
        delivered = driver.simulate(count, rng=rng)
    except messagebus.CascadeLimitExceeded as e:
        return jsonify({"message": str(e)}), 400
    return jsonify({"delivered": [events.to_dict(e) for e in delivered]}), 201


@app.route("/machines", methods=["GET"])
def machines_endpoint():
    return jsonify(views.stock_levels(driver.uow)), 200


@app.route("/machines/<machine_id>", methods=["GET"])
def machine_endpoint(machine_id: str):
    result = views.machine(machine_id, driver.uow)
    if result is None:
        return "not found", 404
    return jsonify(result), 200


@app.route("/subscriptions", methods=["GET"])
def subscriptions_endpoint():
    return jsonify(views.subscriptions(driver.bus)), 200
