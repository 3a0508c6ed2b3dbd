"""
services/closing_service.py — Game-close orchestration.

Glues the two pure engines together the way the caller must use them when a
game ends:

  1. validate the snapshot (validation_service.validate_session)
  2. refuse to settle while structural errors remain
  3. derive each player's net and compute transfers (settlement_service)

validation_service and settlement_service do not know about each other;
this module is the only place that calls both.

Layer rules:
  - No Flask imports. Configuration values (player cap, strict financial
    policy) are passed in as arguments by the route.
  - Raises AppError for requests that cannot be served. The engines
    themselves never raise.
"""

from __future__ import annotations

import logging

from backend.app.errors import AppError, ErrorCode, WarningCode
from backend.app.models.game_session import GameSession, SessionStatus
from backend.app.models.validation import CloseCheck
from backend.app.services import settlement_service, validation_service

logger = logging.getLogger(__name__)


def evaluate_close(
        session: GameSession,
        max_players: int = validation_service.MAX_PLAYERS_PER_GAME,
        block_on_financial_mismatch: bool = False,
) -> CloseCheck:
    """
    Decides whether a session may transition to completed.

    Validation errors always block. Financial reconciliation warnings block
    only when block_on_financial_mismatch is set; every other warning is
    informational.
    """
    report = validation_service.validate_session(session, max_players=max_players)
    blockers = list(report.errors)

    if block_on_financial_mismatch:
        blockers.extend(validation_service.validate_financial_consistency(session).warnings)

    return CloseCheck(can_close=not blockers, blockers=blockers, report=report)


def settle_session(
        session: GameSession,
        max_players: int = validation_service.MAX_PLAYERS_PER_GAME,
        block_on_financial_mismatch: bool = False,
) -> tuple[dict, list[dict]]:
    """
    Computes the final settlement for a game that is closing.

    Returns:
        (result, warnings) where result holds "results" (PlayerResult list),
        "transfers" (Transfer list) and "summary" (text), and warnings is a
        list of {"code", "message"} dicts: validation warnings passed through,
        plus UNSETTLED_BALANCE when rounding leaves money unmatched.

    Raises:
        AppError(SESSION_STILL_ACTIVE, 409) -- players may still hold points.
        AppError(SESSION_INVALID, 422)      -- blockers listed in details.
    """
    if session.status == SessionStatus.ACTIVE:
        raise AppError(
            ErrorCode.SESSION_STILL_ACTIVE,
            f"Session {session.id} is still active. "
            f"Move it to pending_close before settling.",
            409,
            field="status",
        )

    check = evaluate_close(
        session,
        max_players=max_players,
        block_on_financial_mismatch=block_on_financial_mismatch,
    )
    if not check.can_close:
        logger.info(
            "Refusing to settle session %s: %d blocking issue(s)",
            session.id,
            len(check.blockers),
        )
        raise AppError(
            ErrorCode.SESSION_INVALID,
            f"Session {session.id} cannot be closed until "
            f"{len(check.blockers)} issue(s) are resolved.",
            422,
            details=check.blockers,
        )

    results = settlement_service.compute_player_results(session)
    nets = settlement_service.compute_player_nets(session)
    transfers = settlement_service.compute_settlements(nets)
    names = {net.id: net.name for net in nets}

    warnings = [
        {"code": WarningCode.VALIDATION_WARNING, "message": message}
        for message in check.report.warnings
    ]
    residual = settlement_service.settlement_residual(nets)
    if residual != 0:
        warnings.append({
            "code": WarningCode.UNSETTLED_BALANCE,
            "message": (
                f"Player nets do not sum to zero (off by {residual}). "
                f"The remainder is left unsettled."
            ),
        })

    result = {
        "results": results,
        "transfers": transfers,
        "summary": settlement_service.format_payment_summary(transfers, names),
    }
    return result, warnings
