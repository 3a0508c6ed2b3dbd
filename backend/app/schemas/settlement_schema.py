"""
schemas/settlement_schema.py — Marshmallow schemas for settlement endpoints.

Validation responsibility:
  - This file: field types, required keys, at least one player.
  - services/settlement_service.py: nothing to reject. Zero nets, a single
    player, or nets that do not sum to zero are all handled (the last one
    with an UNSETTLED_BALANCE warning at the route).

Output schemas (TransferSchema, PlayerResultSchema) are dump-only and
produce the camelCase shapes the client expects.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate

from backend.app.models.settlement import PlayerNet


def _validate_non_empty_after_trim(value: str) -> None:
    """
    Raises ValidationError if the string is blank or contains only whitespace.
    validate.Length(min=1) alone would accept "   ".
    """
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


class PlayerNetSchema(Schema):

    class Meta:
        unknown = EXCLUDE

    id = fields.Str(required=True, validate=_validate_non_empty_after_trim)
    name = fields.Str(load_default="")
    # Signed: positive = owed money, negative = owes money.
    net = fields.Decimal(required=True)

    @post_load
    def make_player_net(self, data: dict, **kwargs) -> PlayerNet:
        return PlayerNet(**data)


class ComputeSettlementSchema(Schema):
    """
    POST /settlements

    Body: {"players": [{"id": "...", "name": "...", "net": "12.5"}, ...]}
    One entry per distinct participant; ids are not checked for uniqueness.
    """

    players = fields.List(
        fields.Nested(PlayerNetSchema),
        required=True,
        validate=validate.Length(min=1, error="At least one player is required."),
    )


class TransferSchema(Schema):

    from_id = fields.Str(data_key="fromId", dump_only=True)
    to_id = fields.Str(data_key="toId", dump_only=True)
    amount = fields.Decimal(dump_only=True)


class PlayerResultSchema(Schema):

    player_id = fields.Str(data_key="playerId", dump_only=True)
    player_name = fields.Str(data_key="playerName", dump_only=True)
    total_buy_in = fields.Decimal(data_key="totalBuyIn", dump_only=True)
    total_cash_out = fields.Decimal(data_key="totalCashOut", dump_only=True)
    net_profit_loss = fields.Decimal(data_key="netProfitLoss", dump_only=True)
