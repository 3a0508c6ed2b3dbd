"""
models/settlement.py — Settlement input and output records.

Produced and consumed by services/settlement_service.py. Never persisted by
this package; the caller stores or displays them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PlayerNet:
    """One participant's final result: positive is owed money, negative owes."""

    id: str
    name: str
    net: Decimal


@dataclass(frozen=True)
class Transfer:
    """A single payment from a debtor to a creditor. amount is always > 0."""

    from_id: str
    to_id: str
    amount: Decimal


@dataclass(frozen=True)
class PlayerResult:
    player_id: str | None
    player_name: str | None
    total_buy_in: Decimal
    total_cash_out: Decimal
    net_profit_loss: Decimal
