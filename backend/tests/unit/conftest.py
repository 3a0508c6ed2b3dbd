"""
tests/unit/conftest.py — Snapshot builders shared by the unit tests.

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test:

  - buy_in(amount)                → BuyIn with a timestamp
  - cash_out(points, value)       → CashOutEntry with a timestamp
  - make_player(name, ...)        → PlayerInGame
  - make_session(players, ...)    → GameSession
  - baseline_players()            → a live game that is fully consistent
  - completed_players()           → a finished game (A +30, B -10, C -20)

Baseline live game (rate 0.10 per point, standard buy-in 25):
  Alice  active            bought 25        stack 250
  Bob    active            bought 25 + 25   stack 500
  Carol  cashed_out_early  bought 25        cashed out 200 pts for 20.00,
                                            left 50 pts on the table
  Points on table: 250 + 500 + 50 = 800
  Money: buy-ins 100 == cash-outs 20 + 800 * 0.10
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from backend.app.models.game_session import (
    BuyIn,
    CashOutEntry,
    GameSession,
    PlayerInGame,
    PlayerStatus,
    SessionStatus,
)

T0 = datetime(2025, 3, 14, 19, 0, tzinfo=timezone.utc)


def buy_in(amount: str, minutes: int = 0) -> BuyIn:
    return BuyIn(amount=Decimal(amount), time=T0 + timedelta(minutes=minutes))


def cash_out(points: str, value: str, minutes: int = 60) -> CashOutEntry:
    return CashOutEntry(
        points_cashed_out=Decimal(points),
        cash_value=Decimal(value),
        time=T0 + timedelta(minutes=minutes),
    )


def make_player(
    name: str | None,
    *,
    player_id: str | None = "",
    stack: str = "0",
    status: PlayerStatus = PlayerStatus.ACTIVE,
    cash_out_amount: str = "0",
    points_left_on_table: str | None = None,
    buy_ins: tuple = ("25",),
    cash_out_log: tuple = (),
) -> PlayerInGame:
    if player_id == "":
        player_id = f"p-{(name or 'anon').lower()}"
    return PlayerInGame(
        player_id=player_id,
        name=name,
        point_stack=Decimal(stack),
        status=status,
        cash_out_amount=Decimal(cash_out_amount),
        points_left_on_table=(
            None if points_left_on_table is None else Decimal(points_left_on_table)
        ),
        buy_ins=tuple(b if isinstance(b, BuyIn) else buy_in(b) for b in buy_ins),
        cash_out_log=tuple(cash_out_log),
    )


def baseline_players() -> list[PlayerInGame]:
    return [
        make_player("Alice", stack="250"),
        make_player("Bob", stack="500", buy_ins=("25", "25")),
        make_player(
            "Carol",
            status=PlayerStatus.CASHED_OUT_EARLY,
            cash_out_amount="20.00",
            points_left_on_table="50",
            cash_out_log=(cash_out("200", "20.00"),),
        ),
    ]


def completed_players() -> list[PlayerInGame]:
    """Everyone cashed out at the end: Alice +30, Bob -10, Carol -20."""
    return [
        make_player("Alice", cash_out_amount="55", cash_out_log=(cash_out("550", "55"),)),
        make_player("Bob", cash_out_amount="15", cash_out_log=(cash_out("150", "15"),)),
        make_player("Carol", cash_out_amount="5", cash_out_log=(cash_out("50", "5"),)),
    ]


def make_session(players: list[PlayerInGame] | None = None, **overrides) -> GameSession:
    fields = {
        "id": "game-1",
        "name": "Friday Night",
        "start_time": T0,
        "point_to_cash_rate": Decimal("0.1"),
        "standard_buy_in_amount": Decimal("25"),
        "current_physical_points_on_table": Decimal("800"),
        "status": SessionStatus.ACTIVE,
        "players_in_game": tuple(baseline_players() if players is None else players),
    }
    fields.update(overrides)
    return GameSession(**fields)


def make_completed_session(**overrides) -> GameSession:
    fields = {
        "status": SessionStatus.COMPLETED,
        "current_physical_points_on_table": Decimal("0"),
    }
    fields.update(overrides)
    return make_session(completed_players(), **fields)
