from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class ValidationReport:
    """Errors block a session from closing; warnings are informational."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: ValidationReport, prefix: str = "") -> None:
        self.errors.extend(f"{prefix}{error}" for error in other.errors)
        self.warnings.extend(f"{prefix}{warning}" for warning in other.warnings)

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class FinancialTotals:
    total_buy_ins: Decimal
    total_cash_outs: Decimal
    points_value: Decimal

    @property
    def accounted_for(self) -> Decimal:
        return self.total_cash_outs + self.points_value

    @property
    def difference(self) -> Decimal:
        return abs(self.total_buy_ins - self.accounted_for)


@dataclass(frozen=True)
class CloseCheck:
    can_close: bool
    blockers: list[str]
    report: ValidationReport
