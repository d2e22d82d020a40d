import os
from dataclasses import dataclass
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ----------------------------
# Storage
# ----------------------------
DATABASE_URL = os.environ.get("DATABASE_URL", None)
COUNTER_BACKEND = os.getenv("COUNTER_BACKEND", "pg").lower()  # 'pg' | 'redis'
REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379")
REDIS_MAX_CONN = _env_int("REDIS_MAX_CONN", 64)
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 10)
# defaults to DB_POOL_SIZE when unset
DB_GATE_LIMIT = _env_int("DB_GATE_LIMIT", 0) or None

# ----------------------------
# HTTP
# ----------------------------
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _env_int("PORT", 3000)
CORS_ORIGINS: List[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ----------------------------
# Tiers & pricing
# ----------------------------
@dataclass(frozen=True)
class TierConfig:
    """Capacity and price steps of one ticket tier.

    `low_threshold` is the sold count at which the price steps from
    `low_price` to `high_price`. Flat tiers set it equal to `capacity`.
    """
    name: str
    capacity: int
    low_threshold: int
    low_price: int
    high_price: int


TICKET_TIERS: Dict[str, TierConfig] = {
    "A": TierConfig(
        name="A",
        capacity=_env_int("TIER_A_CAPACITY", 150),
        low_threshold=_env_int("TIER_A_LOW_THRESHOLD", 50),
        low_price=_env_int("TIER_A_LOW_PRICE", 500),
        high_price=_env_int("TIER_A_HIGH_PRICE", 600),
    ),
    "B": TierConfig(
        name="B",
        capacity=_env_int("TIER_B_CAPACITY", 300),
        low_threshold=_env_int("TIER_B_CAPACITY", 300),
        low_price=_env_int("TIER_B_PRICE", 400),
        high_price=_env_int("TIER_B_PRICE", 400),
    ),
    "C": TierConfig(
        name="C",
        capacity=_env_int("TIER_C_CAPACITY", 150),
        low_threshold=_env_int("TIER_C_CAPACITY", 150),
        low_price=_env_int("TIER_C_PRICE", 300),
        high_price=_env_int("TIER_C_PRICE", 300),
    ),
}

# bounded (compare-and-increment) reservation; 0 restores the legacy
# check-then-increment window
STRICT_CAPACITY = _env_flag("STRICT_CAPACITY", True)

# ----------------------------
# Verification
# ----------------------------
VERIFY_STATUS = os.getenv("VERIFY_STATUS", "PENDING").upper()
VERIFY_REQUIRE_EXISTING = _env_flag("VERIFY_REQUIRE_EXISTING", False)

# ----------------------------
# UPI payment request
# ----------------------------
UPI_PAYEE = os.getenv("UPI_PAYEE", "msram.8274@okicici")
UPI_PAYEE_NAME = os.getenv("UPI_PAYEE_NAME", "TEDxSairam")
UPI_NOTE = os.getenv("UPI_NOTE", "TEDx Ticket")
UPI_CURRENCY = "INR"