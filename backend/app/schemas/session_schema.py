"""
schemas/session_schema.py — Marshmallow schemas for game-session snapshots.

Validation responsibility:
  - This file: shape only. Field types, enum values, and that every buy-in
    and cash-out entry carries its amounts.
  - services/validation_service.py: everything else. Missing ids, names,
    timestamps and rates, non-positive amounts, duplicate names, drift.
    Those fields are therefore optional here (load_default=None) so an
    incomplete snapshot reaches the validator and gets a full report instead
    of a single 400.

Wire format: camelCase keys as stored by the client (pointToCashRate,
playersInGame, ...). Python attributes are snake_case; data_key maps them.
Unknown keys (invitedUsers, isOwner, editedAt, ...) are ignored.

The same schemas dump a (repaired) GameSession back to the wire format.
Decimal values are dumped as Decimal; the app's JSON provider serialises
them as strings.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import EXCLUDE, Schema, fields, post_load

from backend.app.models.game_session import (
    BuyIn,
    CashOutEntry,
    GameSession,
    PlayerInGame,
    PlayerStatus,
    SessionStatus,
)


class _SnapshotSchema(Schema):

    class Meta:
        unknown = EXCLUDE


class BuyInSchema(_SnapshotSchema):

    amount = fields.Decimal(required=True)
    time = fields.DateTime(load_default=None)
    log_id = fields.Str(data_key="logId", load_default=None)

    @post_load
    def make_buy_in(self, data: dict, **kwargs) -> BuyIn:
        return BuyIn(**data)


class CashOutEntrySchema(_SnapshotSchema):

    points_cashed_out = fields.Decimal(data_key="pointsCashedOut", required=True)
    cash_value = fields.Decimal(data_key="cashValue", required=True)
    time = fields.DateTime(load_default=None)
    log_id = fields.Str(data_key="logId", load_default=None)

    @post_load
    def make_entry(self, data: dict, **kwargs) -> CashOutEntry:
        return CashOutEntry(**data)


class PlayerInGameSchema(_SnapshotSchema):

    player_id = fields.Str(data_key="playerId", load_default=None)
    name = fields.Str(load_default=None)
    point_stack = fields.Decimal(data_key="pointStack", load_default=Decimal("0"))
    status = fields.Enum(
        PlayerStatus,
        by_value=True,
        load_default=PlayerStatus.ACTIVE,
    )
    cash_out_amount = fields.Decimal(data_key="cashOutAmount", load_default=Decimal("0"))
    points_left_on_table = fields.Decimal(data_key="pointsLeftOnTable", load_default=None)
    buy_ins = fields.List(
        fields.Nested(BuyInSchema),
        data_key="buyIns",
        load_default=list,
    )
    cash_out_log = fields.List(
        fields.Nested(CashOutEntrySchema),
        data_key="cashOutLog",
        load_default=list,
    )

    @post_load
    def make_player(self, data: dict, **kwargs) -> PlayerInGame:
        return PlayerInGame(**data)


class GameSessionSchema(_SnapshotSchema):
    """
    A full session snapshot (POST /sessions/validate, /repair, /results,
    /close-check, /settlement).
    """

    id = fields.Str(load_default=None)
    name = fields.Str(load_default=None)
    start_time = fields.DateTime(data_key="startTime", load_default=None)
    end_time = fields.DateTime(data_key="endTime", load_default=None)
    status = fields.Enum(
        SessionStatus,
        by_value=True,
        load_default=SessionStatus.ACTIVE,
    )
    point_to_cash_rate = fields.Decimal(data_key="pointToCashRate", load_default=None)
    standard_buy_in_amount = fields.Decimal(data_key="standardBuyInAmount", load_default=None)
    current_physical_points_on_table = fields.Decimal(
        data_key="currentPhysicalPointsOnTable",
        load_default=Decimal("0"),
    )
    players_in_game = fields.List(
        fields.Nested(PlayerInGameSchema),
        data_key="playersInGame",
        load_default=list,
    )

    @post_load
    def make_session(self, data: dict, **kwargs) -> GameSession:
        return GameSession(**data)
