"""
models/game_session.py — In-memory snapshot of a poker game session.

No business logic. No imports from services or routes.

Key design points:
  - These are plain frozen dataclasses, not table rows. The snapshot is read
    from the data store by the caller and handed to the services as-is.
  - Money and points are Decimal, never float.
  - Fields that the validator reports on when missing (ids, names, rates,
    timestamps) are Optional so an incomplete snapshot can still be built
    and validated instead of failing at construction.
  - Collections are tuples; a list passed in is converted in __post_init__.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


# ── Enum Definitions ───────────────────────────────────────────────────────
# Defined here so they can be imported by schemas and services without
# repeating string literals anywhere else in the codebase.

class SessionStatus(str, enum.Enum):
    ACTIVE        = "active"
    PENDING_CLOSE = "pending_close"
    COMPLETED     = "completed"


class PlayerStatus(str, enum.Enum):
    ACTIVE           = "active"
    CASHED_OUT_EARLY = "cashed_out_early"


# ── Ledger entries ─────────────────────────────────────────────────────────
# Buy-ins and cash-outs are an audit trail: repair never rewrites them.

@dataclass(frozen=True)
class BuyIn:
    amount: Decimal
    time: datetime | None = None
    log_id: str | None = None


@dataclass(frozen=True)
class CashOutEntry:
    points_cashed_out: Decimal
    cash_value: Decimal
    time: datetime | None = None
    log_id: str | None = None


# ── Aggregates ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlayerInGame:
    player_id: str | None
    name: str | None
    point_stack: Decimal = Decimal("0")
    status: PlayerStatus = PlayerStatus.ACTIVE
    cash_out_amount: Decimal = Decimal("0")
    # Only meaningful for CASHED_OUT_EARLY: points still in play on the
    # player's behalf after they left.
    points_left_on_table: Decimal | None = None
    buy_ins: tuple[BuyIn, ...] = field(default_factory=tuple)
    cash_out_log: tuple[CashOutEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "buy_ins", tuple(self.buy_ins))
        object.__setattr__(self, "cash_out_log", tuple(self.cash_out_log))

    @property
    def total_buy_in(self) -> Decimal:
        return sum((buy_in.amount for buy_in in self.buy_ins), Decimal("0"))

    @property
    def is_early_cashout(self) -> bool:
        return self.status == PlayerStatus.CASHED_OUT_EARLY


@dataclass(frozen=True)
class GameSession:
    id: str | None
    name: str | None
    start_time: datetime | None
    point_to_cash_rate: Decimal | None
    standard_buy_in_amount: Decimal | None
    current_physical_points_on_table: Decimal = Decimal("0")
    status: SessionStatus = SessionStatus.ACTIVE
    players_in_game: tuple[PlayerInGame, ...] = field(default_factory=tuple)
    end_time: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "players_in_game", tuple(self.players_in_game))

    @property
    def has_valid_rate(self) -> bool:
        return self.point_to_cash_rate is not None and self.point_to_cash_rate > 0
