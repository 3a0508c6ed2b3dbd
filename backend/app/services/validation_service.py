"""
services/validation_service.py — Game-state consistency checks and repair.

Validation is layered. Each layer is a public function returning a
ValidationReport and can be called on its own:

  validate_session_fields   required session fields, positive rates, player cap
  validate_player           one player's ledger
  validate_players          every player + duplicate names
  validate_physical_points  stored points-on-table vs per-player formula
  validate_financial_consistency  money in vs money accounted for
  validate_session          all of the above

Policy:
  - Structural problems are ERRORS and make the session invalid: missing
    ids/names/timestamps, non-positive rates or amounts, negative stacks,
    duplicate names, a player without buy-ins, too many players.
  - Numeric drift is a WARNING and never invalidates: physical points,
    financial totals, point-stack arithmetic, early-cashout leftovers.
    Stored counters may drift during live play, and cash-outs may be
    recorded late.

Layer rules:
  - No Flask imports. Pure functions over models/ dataclasses.
  - Never raises for data-quality problems. Every problem is a string in
    errors or warnings. Checks that need the point rate are skipped when the
    rate itself is missing or non-positive (that is already an error).

Repair (repair_session / repair_session_with_log) only touches derived
fields: current_physical_points_on_table, and the point_stack /
points_left_on_table of early-cashout players. Buy-ins and cash-out logs are
an audit trail and are never rewritten.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal

from backend.app.errors import WarningCode
from backend.app.models.game_session import (
    GameSession,
    PlayerInGame,
    PlayerStatus,
    SessionStatus,
)
from backend.app.models.validation import FinancialTotals, ValidationReport
from backend.app.services.money import points_for_amount, to_decimal

logger = logging.getLogger(__name__)

MAX_PLAYERS_PER_GAME = 99

# Points and money are compared with a small tolerance; the point-stack
# arithmetic check allows one point because buy-ins floor to whole points.
PHYSICAL_POINTS_TOLERANCE = Decimal("0.01")
FINANCIAL_TOLERANCE = Decimal("0.01")
POINT_STACK_TOLERANCE = Decimal("1")

_ZERO = Decimal("0")


# ── Session fields ─────────────────────────────────────────────────────────

def validate_session_fields(
        session: GameSession,
        max_players: int = MAX_PLAYERS_PER_GAME,
) -> ValidationReport:
    report = ValidationReport()

    if not session.id:
        report.errors.append("Session missing ID")

    if not session.name or not session.name.strip():
        report.errors.append("Session missing or empty name")

    if session.start_time is None:
        report.errors.append("Session missing start time")

    if session.point_to_cash_rate is None:
        report.errors.append("Session missing point to cash rate")
    elif session.point_to_cash_rate <= 0:
        report.errors.append(f"Invalid point to cash rate: {session.point_to_cash_rate}")

    if session.standard_buy_in_amount is None:
        report.errors.append("Session missing standard buy-in amount")
    elif session.standard_buy_in_amount <= 0:
        report.errors.append(f"Invalid standard buy-in amount: {session.standard_buy_in_amount}")

    player_count = len(session.players_in_game)
    if player_count > max_players:
        report.errors.append(
            f"Too many players: {player_count} (maximum {max_players} per game)"
        )

    return report


# ── Players ────────────────────────────────────────────────────────────────

def validate_player(
        player: PlayerInGame,
        point_to_cash_rate: Decimal | None,
) -> ValidationReport:
    """
    Checks one player's ledger. Messages are not prefixed with the player's
    name; validate_players() does that.
    """
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings

    if not player.player_id:
        errors.append("Missing player ID")

    if not player.name or not player.name.strip():
        errors.append("Missing or empty player name")

    if player.point_stack < 0:
        errors.append("Negative point stack")

    if player.cash_out_amount < 0:
        errors.append("Negative cash out amount")

    if not player.buy_ins:
        errors.append("Player has no buy-ins")
    for buy_in in player.buy_ins:
        if buy_in.amount <= 0:
            errors.append(f"Invalid buy-in amount: {buy_in.amount}")
        if buy_in.time is None:
            errors.append("Buy-in missing timestamp")

    for entry in player.cash_out_log:
        if entry.points_cashed_out < 0:
            errors.append(f"Invalid cash-out points: {entry.points_cashed_out}")
        if entry.cash_value < 0:
            errors.append(f"Invalid cash-out value: {entry.cash_value}")
        if entry.time is None:
            errors.append("Cash-out missing timestamp")

    if player.is_early_cashout:
        if player.point_stack != 0:
            warnings.append("Early cashout player should have 0 point stack")
        if player.points_left_on_table is None or player.points_left_on_table < 0:
            warnings.append("Early cashout player missing or invalid pointsLeftOnTable")

    if (
        player.status == PlayerStatus.ACTIVE
        and point_to_cash_rate is not None
        and point_to_cash_rate > 0
    ):
        expected = expected_point_stack(player, point_to_cash_rate)
        if abs(player.point_stack - expected) > POINT_STACK_TOLERANCE:
            warnings.append(
                f"Point stack mismatch: expected {expected}, actual {player.point_stack}"
            )

    return report


def expected_point_stack(player: PlayerInGame, point_to_cash_rate: Decimal) -> Decimal:
    """Points bought (floored per buy-in) minus points already cashed out."""
    bought = sum(
        (points_for_amount(buy_in.amount, point_to_cash_rate) for buy_in in player.buy_ins),
        0,
    )
    cashed_out = sum(
        (to_decimal(entry.points_cashed_out) for entry in player.cash_out_log),
        _ZERO,
    )
    return Decimal(bought) - cashed_out


def find_duplicate_names(players: Iterable[PlayerInGame]) -> list[str]:
    """
    Names (lower-cased, trimmed) that appear more than once.

    Each duplicate is listed once, in the order the first collision is seen.
    Players without a name are skipped; validate_player reports them.
    """
    seen: set[str] = set()
    duplicates: list[str] = []
    for player in players:
        if not player.name:
            continue
        key = player.name.strip().lower()
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


def validate_players(
        players: Sequence[PlayerInGame],
        point_to_cash_rate: Decimal | None,
) -> ValidationReport:
    report = ValidationReport()

    for player in players:
        label = player.name or player.player_id or "<unnamed>"
        report.merge(validate_player(player, point_to_cash_rate), prefix=f"Player {label}: ")

    duplicates = find_duplicate_names(players)
    if duplicates:
        report.errors.append(f"Duplicate player names found: {', '.join(duplicates)}")

    return report


# ── Physical points ────────────────────────────────────────────────────────

def calculate_physical_points(players: Iterable[PlayerInGame]) -> Decimal:
    """
    Authoritative count of points still in play.

    Active players contribute their stack. Early-cashout players contribute
    the points they left on the table (missing counts as 0).
    """
    total = _ZERO
    for player in players:
        if player.status == PlayerStatus.ACTIVE:
            total += to_decimal(player.point_stack)
        elif player.status == PlayerStatus.CASHED_OUT_EARLY:
            total += to_decimal(player.points_left_on_table or _ZERO)
    return total


def validate_physical_points(session: GameSession) -> ValidationReport:
    report = ValidationReport()
    stored = session.current_physical_points_on_table

    if session.status == SessionStatus.COMPLETED:
        if stored != 0:
            report.warnings.append("Completed game should have 0 physical points on table")
        return report

    calculated = calculate_physical_points(session.players_in_game)
    if abs(stored - calculated) > PHYSICAL_POINTS_TOLERANCE:
        report.warnings.append(
            f"Physical points mismatch: stored {stored}, calculated {calculated}"
        )

    return report


# ── Financial reconciliation ───────────────────────────────────────────────

def calculate_financial_totals(session: GameSession) -> FinancialTotals:
    """
    Money in (buy-ins) and money accounted for (cash-outs + value of the
    points still on the table). Requires a usable point rate.
    """
    total_buy_ins = sum((player.total_buy_in for player in session.players_in_game), _ZERO)
    total_cash_outs = sum(
        (to_decimal(player.cash_out_amount) for player in session.players_in_game),
        _ZERO,
    )
    points_value = session.current_physical_points_on_table * session.point_to_cash_rate
    return FinancialTotals(
        total_buy_ins=total_buy_ins,
        total_cash_outs=total_cash_outs,
        points_value=points_value,
    )


def validate_financial_consistency(session: GameSession) -> ValidationReport:
    report = ValidationReport()
    if not session.has_valid_rate:
        return report

    totals = calculate_financial_totals(session)
    if totals.difference > FINANCIAL_TOLERANCE:
        report.warnings.append(
            f"Financial inconsistency: Buy-ins {totals.total_buy_ins}, "
            f"Cash-outs + Points Value {totals.accounted_for}, "
            f"Difference {totals.difference}"
        )

    return report


# ── Whole session ──────────────────────────────────────────────────────────

def validate_session(
        session: GameSession,
        max_players: int = MAX_PLAYERS_PER_GAME,
) -> ValidationReport:
    """
    Runs every validation layer and combines the results.

    is_valid is False only for structural errors. Drift shows up as
    warnings and can be fixed with repair_session().
    """
    report = ValidationReport()
    report.merge(validate_session_fields(session, max_players=max_players))
    report.merge(validate_players(session.players_in_game, session.point_to_cash_rate))
    report.merge(validate_physical_points(session))
    report.merge(validate_financial_consistency(session))

    logger.debug(
        "Validated session %s: %d error(s), %d warning(s)",
        session.id,
        len(report.errors),
        len(report.warnings),
    )
    return report


# ── Repair ─────────────────────────────────────────────────────────────────

def repair_session(session: GameSession) -> GameSession:
    """Returns a corrected copy of session. The input is left untouched."""
    repaired, _ = repair_session_with_log(session)
    return repaired


def repair_session_with_log(session: GameSession) -> tuple[GameSession, list[dict]]:
    """
    Returns (repaired copy, corrections).

    Corrections are {"code": WarningCode..., "message": str} dicts, one per
    field changed, and each is also logged at WARNING. Repairing an already
    repaired session returns an equal session and no corrections.
    """
    corrections: list[dict] = []

    def _record(code: str, message: str) -> None:
        logger.warning("Repairing session %s: %s", session.id, message)
        corrections.append({"code": code, "message": message})

    players = []
    for player in session.players_in_game:
        if player.is_early_cashout:
            if player.point_stack != 0:
                _record(
                    WarningCode.POINT_STACK_RESET,
                    f"Player {player.name}: point stack {player.point_stack} reset to 0 "
                    f"for early cashout",
                )
                player = replace(player, point_stack=_ZERO)
            if player.points_left_on_table is None:
                _record(
                    WarningCode.POINTS_LEFT_ON_TABLE_DEFAULTED,
                    f"Player {player.name}: pointsLeftOnTable set to 0",
                )
                player = replace(player, points_left_on_table=_ZERO)
        players.append(player)

    calculated = calculate_physical_points(players)
    if session.current_physical_points_on_table != calculated:
        _record(
            WarningCode.PHYSICAL_POINTS_RECALCULATED,
            f"Physical points on table changed from "
            f"{session.current_physical_points_on_table} to {calculated}",
        )

    repaired = replace(
        session,
        players_in_game=tuple(players),
        current_physical_points_on_table=calculated,
    )
    return repaired, corrections
