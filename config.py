# config.py
import os

from core.models import ScoreBands, Thresholds
from scoring import DEFAULT_LEG_BANDS, DEFAULT_NATIVE_BANDS, DEFAULT_STABLE_BANDS, parse_bands


class ConfigError(ValueError):
    pass


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _float(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _csv(name: str, default: str = "") -> frozenset:
    return frozenset(x for x in os.getenv(name, default).replace(" ", "").split(",") if x)


def _bands(name: str, default):
    raw = _env(name)
    if not raw:
        return default
    try:
        return parse_bands(raw)
    except ValueError as e:
        raise ConfigError(f"{name}: {e}") from e


# -----------------------------
# SERVICE
# -----------------------------
HELIUS_AUTH_HEADER = _env("HELIUS_AUTH_HEADER")
DISCORD_WEBHOOK_URL = _env("DISCORD_WEBHOOK_URL")
TELEGRAM_BOT_TOKEN = _env("TELEGRAM_BOT_TOKEN")
TELEGRAM_CHAT_ID = _env("TELEGRAM_CHAT_ID")
SEND_TIMEOUT = _float("SEND_TIMEOUT", 10.0)

TRACKED_WALLETS_FILE = _env("TRACKED_WALLETS_FILE") or os.path.join(os.getcwd(), "data", "tracked-wallets.json")
WATCHLIST_TTL_SECONDS = _float("WATCHLIST_TTL_SECONDS", 0)

LOG_LEVEL = _env("LOG_LEVEL", "INFO") or "INFO"
PORT = _int("PORT", 8000)

# -----------------------------
# ALERT POLICY
# -----------------------------
# wSOL is not a stable; USDC + USDT mainnet mints
DEFAULT_STABLE_MINTS = (
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v,"  # USDC
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"   # USDT
)

PING_TEXT = _env("PING_TEXT", "@here")


def load_thresholds() -> Thresholds:
    """
    Thresholds of 0 switch a dimension off, and a switched-off dimension
    always passes.
    """
    return Thresholds(
        min_native=_float("MIN_NATIVE", 0.25),
        min_stable=_float("MIN_STABLE", 0),
        min_leg=_float("MIN_LEG", 0),
        cooldown_seconds=_float("COOLDOWN_SECONDS", 600),
        max_alerts_per_batch=_int("MAX_ALERTS_PER_BATCH", 5),
        watch_types=frozenset(t.upper() for t in _csv("WATCH_TYPES", "SWAP")),
        stable_mints=_csv("STABLE_MINTS", DEFAULT_STABLE_MINTS),
        ping_score=_int("PING_SCORE", 6),
        native_decimals=_int("NATIVE_DECIMALS", 9),
        native_dust=_float("NATIVE_DUST", 0.01),
    )


def load_score_bands() -> ScoreBands:
    return ScoreBands(
        native=_bands("SCORE_NATIVE_BANDS", DEFAULT_NATIVE_BANDS),
        stable=_bands("SCORE_STABLE_BANDS", DEFAULT_STABLE_BANDS),
        leg=_bands("SCORE_LEG_BANDS", DEFAULT_LEG_BANDS),
        leg_presence_points=max(0, _int("SCORE_LEG_PRESENCE", 1)),
    )
