"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing").
  - The API is stateless, so there is nothing to clean up between tests.
    Every request carries its own snapshot.

Helper functions (not fixtures) build request bodies:
  - buy_in(amount)            → buy-in entry dict
  - cash_out(points, value)   → cash-out entry dict
  - player(name, ...)         → playersInGame entry dict
  - live_snapshot()           → a consistent live game (see below)
  - completed_snapshot()      → a finished game: Alice +30, Bob -10, Carol -20
  - post(client, path, body)  → response for POST /api/v1<path>

Live game (rate 0.10 per point):
  Alice  active            bought 25        stack 250
  Bob    active            bought 25 + 25   stack 500
  Carol  cashed_out_early  bought 25        cashed out 200 pts for 20.00,
                                            left 50 pts on the table
  Points on table: 800
"""

from __future__ import annotations

import pytest

from backend.app import create_app

T0 = "2025-03-14T19:00:00+00:00"
T1 = "2025-03-14T21:00:00+00:00"


# ═══════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Creates the Flask application in 'testing' mode once for the entire test session."""
    flask_app = create_app("testing")
    yield flask_app


@pytest.fixture()
def client(app):
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Snapshot builders
# ═══════════════════════════════════════════════════════════════════════════

def buy_in(amount: str, time: str = T0) -> dict:
    return {"amount": amount, "time": time}


def cash_out(points: str, value: str, time: str = T1) -> dict:
    return {"pointsCashedOut": points, "cashValue": value, "time": time}


def player(
    name: str,
    *,
    stack: str = "0",
    status: str = "active",
    cash_out_amount: str = "0",
    points_left_on_table: str | None = None,
    buy_ins: list | None = None,
    cash_out_log: list | None = None,
) -> dict:
    entry = {
        "playerId": f"p-{name.lower()}",
        "name": name,
        "pointStack": stack,
        "status": status,
        "cashOutAmount": cash_out_amount,
        "buyIns": buy_ins if buy_ins is not None else [buy_in("25")],
        "cashOutLog": cash_out_log or [],
    }
    if points_left_on_table is not None:
        entry["pointsLeftOnTable"] = points_left_on_table
    return entry


def live_snapshot(**overrides) -> dict:
    payload = {
        "id": "game-1",
        "name": "Friday Night",
        "startTime": T0,
        "status": "active",
        "pointToCashRate": "0.1",
        "standardBuyInAmount": "25",
        "currentPhysicalPointsOnTable": "800",
        "playersInGame": [
            player("Alice", stack="250"),
            player("Bob", stack="500", buy_ins=[buy_in("25"), buy_in("25")]),
            player(
                "Carol",
                status="cashed_out_early",
                cash_out_amount="20.00",
                points_left_on_table="50",
                cash_out_log=[cash_out("200", "20.00")],
            ),
        ],
    }
    payload.update(overrides)
    return payload


def completed_snapshot(**overrides) -> dict:
    payload = live_snapshot(
        status="completed",
        endTime=T1,
        currentPhysicalPointsOnTable="0",
        playersInGame=[
            player("Alice", cash_out_amount="55", cash_out_log=[cash_out("550", "55")]),
            player("Bob", cash_out_amount="15", cash_out_log=[cash_out("150", "15")]),
            player("Carol", cash_out_amount="5", cash_out_log=[cash_out("50", "5")]),
        ],
    )
    payload.update(overrides)
    return payload


def post(client, path: str, body):
    return client.post(f"/api/v1{path}", json=body)
