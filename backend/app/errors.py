"""
errors.py — AppError base class and error/warning code registry.

Every error returned by the ledger API must use a code defined here.
Do not raise strings or generic exceptions from route or orchestration code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - The pure services (settlement_service, validation_service) never raise
    AppError for data-quality problems. They return reports. Only the
    orchestration layer (closing_service) and the routes raise.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
            details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field    # which request field caused the error
        self.details     = details  # e.g. the list of blocking validation errors

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD        = "MISSING_FIELD"
    INVALID_FIELD        = "INVALID_FIELD"
    INVALID_JSON         = "INVALID_JSON"

    # ── Routing Errors (404 / 405) ─────────────────────────────────────────
    NOT_FOUND            = "NOT_FOUND"
    METHOD_NOT_ALLOWED   = "METHOD_NOT_ALLOWED"

    # ── Game-close rules ───────────────────────────────────────────────────
    SESSION_STILL_ACTIVE = "SESSION_STILL_ACTIVE"  # 409 — settle before close
    SESSION_INVALID      = "SESSION_INVALID"       # 422 — structural errors block close

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR       = "INTERNAL_ERROR"


# ── Warning Code Registry ──────────────────────────────────────────────────
#
# Warnings are returned alongside a 2xx response in the `warnings` array.
# They do not block the request.
# ──────────────────────────────────────────────────────────────────────────

class WarningCode:

    # Rounded nets did not sum to zero; the remainder is left unsettled.
    UNSETTLED_BALANCE             = "UNSETTLED_BALANCE"

    # A validator warning (numeric drift) passed through on a successful call.
    VALIDATION_WARNING            = "VALIDATION_WARNING"

    # Corrections applied by validation_service.repair_session_with_log().
    POINT_STACK_RESET             = "POINT_STACK_RESET"
    POINTS_LEFT_ON_TABLE_DEFAULTED = "POINTS_LEFT_ON_TABLE_DEFAULTED"
    PHYSICAL_POINTS_RECALCULATED  = "PHYSICAL_POINTS_RECALCULATED"
