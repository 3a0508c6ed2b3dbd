"""
routes/settlements.py — Settlement route handlers.

Layer rules:
  - Parse, validate, call ONE service, return envelope.
  - No business logic.

Special: if the rounded nets do not sum to zero, the transfers are still
returned (status 200) and an UNSETTLED_BALANCE warning is added to the
envelope: {"data": {...}, "warnings": [{"code": "UNSETTLED_BALANCE", ...}]}.

Endpoints (base url_prefix=/api/v1):
  POST   /settlements  → 200  transfers for a list of player nets
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from backend.app.errors import WarningCode
from backend.app.schemas.settlement_schema import ComputeSettlementSchema, TransferSchema
from backend.app.services import settlement_service

settlements_bp = Blueprint("settlements", __name__)


@settlements_bp.route("/settlements", methods=["POST"])
def compute_settlements():
    """
    POST /settlements — Who pays whom, given each player's final net.

    Response data:
      transfers : [{"fromId", "toId", "amount"}] in payment order
      summary   : plain-text payment summary using the supplied names
    """
    data = ComputeSettlementSchema().load(request.get_json(force=True) or {})
    players = data["players"]

    transfers = settlement_service.compute_settlements(players)
    names = {player.id: player.name or player.id for player in players}

    warnings: list[dict] = []
    residual = settlement_service.settlement_residual(players)
    if residual != 0:
        warnings.append({
            "code": WarningCode.UNSETTLED_BALANCE,
            "message": (
                f"Player nets do not sum to zero (off by {residual}). "
                f"The remainder is left unsettled."
            ),
        })

    return jsonify({
        "data": {
            "transfers": TransferSchema(many=True).dump(transfers),
            "summary": settlement_service.format_payment_summary(transfers, names),
        },
        "warnings": warnings,
    }), 200
