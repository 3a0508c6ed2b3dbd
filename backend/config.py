import logging
import os
from pathlib import Path

from dotenv import load_dotenv


_BACKEND_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _BACKEND_DIR.parent

# Root .env is canonical; backend/.env is read second and never overrides it.
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_BACKEND_DIR / ".env")


def _first_non_empty_env(*names: str, default: str) -> str:
    """Returns the first non-empty env var value from `names`, else `default`."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _parse_int_env(*names: str, default: int) -> int:
    """Parses the first non-empty env var in `names` as int, else returns `default`."""
    raw = _first_non_empty_env(*names, default=str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _parse_bool_env(*names: str, default: bool) -> bool:
    """
    Parses the first non-empty env var in `names` as a boolean flag.

    Accepted truthy values: 1, true, yes, on (case-insensitive).
    Anything else that is set counts as false.
    """
    raw = _first_non_empty_env(*names, default="")
    if raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:

    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="INFO").upper()

    # A game holds at most this many players (the hosted store used to
    # enforce the same cap with a trigger).
    MAX_PLAYERS_PER_GAME: int = _parse_int_env("MAX_PLAYERS_PER_GAME", default=99)

    # Stricter close policy: when true, a financial reconciliation mismatch
    # blocks closing a game instead of only warning.
    BLOCK_CLOSE_ON_FINANCIAL_MISMATCH: bool = _parse_bool_env(
        "BLOCK_CLOSE_ON_FINANCIAL_MISMATCH",
        default=False,
    )


class DevelopmentConfig(BaseConfig):
    DEBUG:   bool = True
    TESTING: bool = False

    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="DEBUG").upper()


class TestingConfig(BaseConfig):

    DEBUG:   bool = True
    TESTING: bool = True

    # Tests must not depend on the developer's shell or .env.
    MAX_PLAYERS_PER_GAME: int = 99
    BLOCK_CLOSE_ON_FINANCIAL_MISMATCH: bool = False


class ProductionConfig(BaseConfig):

    DEBUG:   bool = False
    TESTING: bool = False


def validate_production_config(app) -> None:
    """
    Fail-fast guard for production configuration.

    Must be called in the app factory immediately after
    app.config.from_object(ProductionConfig):

        app.config.from_object(ProductionConfig)
        validate_production_config(app)   # raises ValueError if misconfigured

    Raises ValueError if any value would make the service behave oddly
    instead of failing loudly at startup.
    """
    if app.config.get("MAX_PLAYERS_PER_GAME", 0) <= 0:
        raise ValueError(
            "MAX_PLAYERS_PER_GAME must be a positive integer. "
            f"Got {app.config.get('MAX_PLAYERS_PER_GAME')!r}."
        )
    level = app.config.get("LOG_LEVEL")
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(
            f"LOG_LEVEL {level!r} is not a known logging level. "
            "Use one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )


# ── Config selector ────────────────────────────────────────────────────────
#
# Used by the app factory:
#   from backend.config import config_by_name
#   app.config.from_object(config_by_name[flask_env])
# ──────────────────────────────────────────────────────────────────────────

config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
}

# Convenience alias — resolves the active config class from FLASK_ENV.
# Defaults to development if the variable is not set.
ActiveConfig: type[BaseConfig] = config_by_name.get(
    os.getenv("FLASK_ENV", "development"),
    DevelopmentConfig,
)
