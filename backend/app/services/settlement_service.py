"""
services/settlement_service.py — Net results and debt settlement.

This file is the SINGLE SOURCE OF TRUTH for how a finished game's money is
settled between players. Any change to who pays whom must be made here.

Layer rules:
  - No Flask imports. No current_app, request, or HTTP knowledge.
  - Pure functions over models/ dataclasses. No I/O, no shared state.
  - Never raises for degenerate input: empty or all-zero nets produce [].
  - Does not depend on validation_service. Validating the session first is
    the caller's job (see closing_service.py).

Rounding:
  Nets are rounded to one decimal (money.round_dollars_1) before matching.
  Because rounding may leave the batch up to ±0.1 off zero, the matching
  stops when either side runs out and the remainder stays unsettled.
  settlement_residual() reports that remainder.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from backend.app.models.game_session import GameSession
from backend.app.models.settlement import PlayerNet, PlayerResult, Transfer
from backend.app.services.money import format_currency, round_dollars_1, to_decimal

_ZERO = Decimal("0")


# ── Core algorithm ─────────────────────────────────────────────────────────

def compute_settlements(players: Iterable[PlayerNet]) -> list[Transfer]:
    """
    Greedy largest-first debt settlement.

    Repeatedly matches the largest remaining creditor with the largest
    remaining debtor and moves the smaller of the two balances. Either the
    creditor or the debtor (or both) reaches exactly zero on every step, so
    the loop always terminates.

    Not guaranteed to be the theoretical minimum number of transfers, but it
    is deterministic: ties keep the input order.

    Args:
        players: PlayerNet entries, one per distinct participant.
                 Positive net = is owed money, negative net = owes money.
                 Players with a net of exactly zero are ignored.

    Returns:
        Transfers in emission order, each with a strictly positive amount
        rounded to one decimal.

    Example:
        A +30, B -10, C -20  →  C pays A 20.0, then B pays A 10.0
    """
    players = list(players)

    # Build mutable sorted lists: largest creditor first, most negative debtor first.
    creditors = sorted(
        [(p.id, round_dollars_1(p.net)) for p in players if to_decimal(p.net) > 0],
        key=lambda x: x[1],
        reverse=True,
    )
    debtors = sorted(
        [(p.id, round_dollars_1(p.net)) for p in players if to_decimal(p.net) < 0],
        key=lambda x: x[1],
    )

    transfers: list[Transfer] = []
    i = j = 0

    while i < len(creditors) and j < len(debtors):
        cid, credit = creditors[i]
        did, debt = debtors[j]

        amount = round_dollars_1(min(credit, -debt))
        # A net that rounds to 0.0 still advances its cursor below,
        # it just never shows up as a transfer.
        if amount > 0:
            transfers.append(Transfer(from_id=did, to_id=cid, amount=amount))

        creditors[i] = (cid, round_dollars_1(credit - amount))
        debtors[j] = (did, round_dollars_1(debt + amount))

        if creditors[i][1] == _ZERO:
            i += 1
        if debtors[j][1] == _ZERO:
            j += 1

    return transfers


def settlement_residual(players: Iterable[PlayerNet]) -> Decimal:
    """
    Sum of the rounded nets compute_settlements() works with.

    Zero for a balanced batch. Anything else is what the greedy matching
    leaves unsettled: positive means creditors are short, negative means
    debtors keep money.
    """
    residual = sum((round_dollars_1(p.net) for p in players), _ZERO)
    return round_dollars_1(residual)


# ── Deriving nets from a session ───────────────────────────────────────────

def compute_player_results(session: GameSession) -> list[PlayerResult]:
    """
    Per-player totals for a finished game, in the session's player order.

    net_profit_loss = cash_out_amount - sum(buy_ins.amount). Points still on
    the table are not counted, so call this once every player is cashed out.
    """
    results: list[PlayerResult] = []
    for player in session.players_in_game:
        total_buy_in = player.total_buy_in
        total_cash_out = to_decimal(player.cash_out_amount)
        results.append(PlayerResult(
            player_id=player.player_id,
            player_name=player.name,
            total_buy_in=total_buy_in,
            total_cash_out=total_cash_out,
            net_profit_loss=total_cash_out - total_buy_in,
        ))
    return results


def compute_player_nets(session: GameSession) -> list[PlayerNet]:
    """Settlement input for a session: one PlayerNet per player."""
    return [
        PlayerNet(
            id=result.player_id,
            name=result.player_name,
            net=result.net_profit_loss,
        )
        for result in compute_player_results(session)
    ]


# ── Presentation ───────────────────────────────────────────────────────────

def format_payment_summary(
        transfers: Iterable[Transfer],
        names: Mapping[str, str] | None = None,
) -> str:
    """
    Renders transfers as plain text suitable for pasting into a group chat.

    names maps player id → display name; unknown ids are printed as-is.
    """
    transfers = list(transfers)
    if not transfers:
        return "No payments needed - all players broke even!"

    names = names or {}
    lines = ["Payment Summary:", ""]
    for index, transfer in enumerate(transfers, start=1):
        payer = names.get(transfer.from_id, transfer.from_id)
        payee = names.get(transfer.to_id, transfer.to_id)
        lines.append(f"{index}. {payer} pays {payee}: {format_currency(transfer.amount)}")
    return "\n".join(lines) + "\n"
