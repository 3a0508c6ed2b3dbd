"""
tests/unit/test_validation_schemas.py — Unit tests for all marshmallow schemas.

What this file proves:
  - Snapshot schemas load camelCase wire keys into the model dataclasses
  - Amounts load as Decimal, statuses as enums, timestamps as datetimes
  - Fields the validator reports on (ids, names, rates, timestamps) are
    optional here, so an incomplete snapshot still loads
  - Unknown keys stored by the client are ignored
  - Shape errors (bad enum value, non-numeric amount, entry without amount)
    raise ValidationError
  - Settlement input requires at least one player with a non-blank id
  - Output schemas dump camelCase keys

Unit test constraints:
  - No Flask application context. Schemas inherit from marshmallow.Schema
    directly and can be instantiated anywhere.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from marshmallow import ValidationError

from backend.app.models.game_session import (
    BuyIn,
    GameSession,
    PlayerInGame,
    PlayerStatus,
    SessionStatus,
)
from backend.app.models.settlement import PlayerNet, PlayerResult, Transfer
from backend.app.schemas.session_schema import GameSessionSchema, PlayerInGameSchema
from backend.app.schemas.settlement_schema import (
    ComputeSettlementSchema,
    PlayerResultSchema,
    TransferSchema,
)


def _snapshot(**overrides) -> dict:
    payload = {
        "id": "game-1",
        "name": "Friday Night",
        "startTime": "2025-03-14T19:00:00+00:00",
        "status": "active",
        "pointToCashRate": "0.1",
        "standardBuyInAmount": "25",
        "currentPhysicalPointsOnTable": "250",
        "playersInGame": [
            {
                "playerId": "p-alice",
                "name": "Alice",
                "pointStack": "250",
                "status": "active",
                "cashOutAmount": "0",
                "buyIns": [
                    {"amount": "25", "time": "2025-03-14T19:00:00+00:00", "logId": "b1"},
                ],
                "cashOutLog": [],
            },
        ],
    }
    payload.update(overrides)
    return payload


# ═══════════════════════════════════════════════════════════════════════════
# GameSessionSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestGameSessionSchema:

    def _load(self, data: dict) -> GameSession:
        return GameSessionSchema().load(data)

    def test_valid_snapshot(self):
        session = self._load(_snapshot())

        assert isinstance(session, GameSession)
        assert session.id == "game-1"
        assert session.status == SessionStatus.ACTIVE
        assert session.point_to_cash_rate == Decimal("0.1")
        assert isinstance(session.start_time, datetime)

        [player] = session.players_in_game
        assert isinstance(player, PlayerInGame)
        assert player.point_stack == Decimal("250")
        assert player.buy_ins == (
            BuyIn(amount=Decimal("25"), time=player.buy_ins[0].time, log_id="b1"),
        )

    def test_amounts_are_decimal(self):
        session = self._load(_snapshot(pointToCashRate=0.25))
        assert isinstance(session.point_to_cash_rate, Decimal)
        assert isinstance(session.players_in_game[0].buy_ins[0].amount, Decimal)

    def test_unknown_keys_are_ignored(self):
        session = self._load(_snapshot(invitedUsers=["u1"], isOwner=True))
        assert session.name == "Friday Night"

    def test_missing_fields_load_as_none(self):
        session = self._load({})

        assert session.id is None
        assert session.name is None
        assert session.start_time is None
        assert session.point_to_cash_rate is None
        assert session.current_physical_points_on_table == 0
        assert session.players_in_game == ()

    def test_invalid_status_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(_snapshot(status="finished"))
        assert "status" in exc.value.messages

    def test_non_numeric_rate_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(_snapshot(pointToCashRate="ten cents"))
        assert "pointToCashRate" in exc.value.messages

    def test_buy_in_without_amount_raises(self):
        payload = _snapshot()
        payload["playersInGame"][0]["buyIns"] = [{"time": "2025-03-14T19:00:00+00:00"}]

        with pytest.raises(ValidationError) as exc:
            self._load(payload)

        assert "amount" in exc.value.messages["playersInGame"][0]["buyIns"][0]

    def test_dump_uses_wire_keys(self):
        dumped = GameSessionSchema().dump(self._load(_snapshot()))

        assert dumped["pointToCashRate"] == Decimal("0.1")
        assert dumped["status"] == "active"
        assert dumped["playersInGame"][0]["playerId"] == "p-alice"
        assert dumped["playersInGame"][0]["buyIns"][0]["logId"] == "b1"


class TestPlayerInGameSchema:

    def test_early_cashout_player(self):
        player = PlayerInGameSchema().load({
            "playerId": "p-carol",
            "name": "Carol",
            "status": "cashed_out_early",
            "pointsLeftOnTable": "50",
            "cashOutAmount": "20.00",
            "cashOutLog": [
                {"pointsCashedOut": "200", "cashValue": "20.00", "time": "2025-03-14T20:00:00Z"},
            ],
        })

        assert player.status == PlayerStatus.CASHED_OUT_EARLY
        assert player.points_left_on_table == Decimal("50")
        assert player.cash_out_log[0].cash_value == Decimal("20.00")

    def test_defaults(self):
        player = PlayerInGameSchema().load({"playerId": "p1", "name": "Dave"})

        assert player.status == PlayerStatus.ACTIVE
        assert player.point_stack == 0
        assert player.points_left_on_table is None
        assert player.buy_ins == ()

    def test_cash_out_entry_requires_values(self):
        with pytest.raises(ValidationError) as exc:
            PlayerInGameSchema().load({"cashOutLog": [{"pointsCashedOut": "10"}]})
        assert "cashValue" in exc.value.messages["cashOutLog"][0]


# ═══════════════════════════════════════════════════════════════════════════
# ComputeSettlementSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestComputeSettlementSchema:

    def _load(self, data: dict):
        return ComputeSettlementSchema().load(data)

    def test_valid_payload(self):
        data = self._load({"players": [
            {"id": "a", "name": "Alice", "net": "30"},
            {"id": "b", "net": -30},
        ]})

        assert data["players"] == [
            PlayerNet(id="a", name="Alice", net=Decimal("30")),
            PlayerNet(id="b", name="", net=Decimal("-30")),
        ]

    def test_players_required(self):
        with pytest.raises(ValidationError) as exc:
            self._load({})
        assert exc.value.messages["players"] == ["Missing data for required field."]

    def test_empty_players_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"players": []})
        assert exc.value.messages["players"] == ["At least one player is required."]

    def test_blank_id_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"players": [{"id": "   ", "net": "0"}]})
        assert "id" in exc.value.messages["players"][0]

    def test_missing_net_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"players": [{"id": "a"}]})
        assert "net" in exc.value.messages["players"][0]

    def test_non_numeric_net_raises(self):
        with pytest.raises(ValidationError):
            self._load({"players": [{"id": "a", "net": "lots"}]})


# ═══════════════════════════════════════════════════════════════════════════
# Output schemas
# ═══════════════════════════════════════════════════════════════════════════

def test_transfer_schema_dump():
    dumped = TransferSchema().dump(Transfer(from_id="b", to_id="a", amount=Decimal("10.0")))
    assert dumped == {"fromId": "b", "toId": "a", "amount": Decimal("10.0")}


def test_player_result_schema_dump():
    result = PlayerResult("p1", "Alice", Decimal("25"), Decimal("55"), Decimal("30"))

    assert PlayerResultSchema().dump(result) == {
        "playerId": "p1",
        "playerName": "Alice",
        "totalBuyIn": Decimal("25"),
        "totalCashOut": Decimal("55"),
        "netProfitLoss": Decimal("30"),
    }
