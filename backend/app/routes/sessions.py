"""
routes/sessions.py — Game-session snapshot route handlers.

Layer rules:
  - Parse the snapshot with GameSessionSchema, call ONE service, return
    envelope. No business logic.
  - Stateless: the snapshot comes in the request body and nothing is stored.
    The caller persists a repaired snapshot or a settlement itself.

Endpoints (base url_prefix=/api/v1/sessions):
  POST /validate     → 200  {isValid, errors, warnings}
  POST /repair       → 200  repaired snapshot; corrections in "warnings"
  POST /results      → 200  per-player buy-in / cash-out / net totals
  POST /close-check  → 200  {canClose, blockers, report}
  POST /settlement   → 200  results + transfers + summary
                       409  SESSION_STILL_ACTIVE
                       422  SESSION_INVALID (blockers in error.details)
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from backend.app.schemas.session_schema import GameSessionSchema
from backend.app.schemas.settlement_schema import PlayerResultSchema, TransferSchema
from backend.app.services import closing_service, settlement_service, validation_service

sessions_bp = Blueprint("sessions", __name__)


def _load_session():
    return GameSessionSchema().load(request.get_json(force=True) or {})


def _close_policy() -> dict:
    """Close-policy settings from app config, as keyword arguments."""
    return {
        "max_players": current_app.config["MAX_PLAYERS_PER_GAME"],
        "block_on_financial_mismatch": current_app.config["BLOCK_CLOSE_ON_FINANCIAL_MISMATCH"],
    }


@sessions_bp.route("/validate", methods=["POST"])
def validate_session():
    """
    POST /sessions/validate

    Always 200 for a well-formed snapshot: an invalid session is a result,
    not a request error. Check data.isValid.
    """
    session = _load_session()
    report = validation_service.validate_session(
        session,
        max_players=current_app.config["MAX_PLAYERS_PER_GAME"],
    )
    return jsonify({"data": report.to_dict(), "warnings": []}), 200


@sessions_bp.route("/repair", methods=["POST"])
def repair_session():
    """POST /sessions/repair — Corrected copy of the snapshot plus what changed."""
    session = _load_session()
    repaired, corrections = validation_service.repair_session_with_log(session)
    return jsonify({
        "data": GameSessionSchema().dump(repaired),
        "warnings": corrections,
    }), 200


@sessions_bp.route("/results", methods=["POST"])
def player_results():
    """POST /sessions/results — Totals and net profit/loss per player."""
    session = _load_session()
    results = settlement_service.compute_player_results(session)
    return jsonify({
        "data": PlayerResultSchema(many=True).dump(results),
        "warnings": [],
    }), 200


@sessions_bp.route("/close-check", methods=["POST"])
def close_check():
    """POST /sessions/close-check — May this session transition to completed?"""
    session = _load_session()
    check = closing_service.evaluate_close(session, **_close_policy())
    return jsonify({
        "data": {
            "canClose": check.can_close,
            "blockers": check.blockers,
            "report": check.report.to_dict(),
        },
        "warnings": [],
    }), 200


@sessions_bp.route("/settlement", methods=["POST"])
def settle_session():
    """
    POST /sessions/settlement — Final settlement for a closing game.

    Validation warnings do not block; they are passed back in "warnings".
    """
    session = _load_session()
    result, warnings = closing_service.settle_session(session, **_close_policy())
    return jsonify({
        "data": {
            "sessionId": session.id,
            "results": PlayerResultSchema(many=True).dump(result["results"]),
            "transfers": TransferSchema(many=True).dump(result["transfers"]),
            "summary": result["summary"],
        },
        "warnings": warnings,
    }), 200
