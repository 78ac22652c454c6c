# polyarb/config.py
"""
Flash Loan Arbitrage Configuration
QuickSwap <-> SushiSwap round trips on Polygon, funded by a flash loan
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / "config" / ".env"

# -----------------------------
# Chain Configuration
# -----------------------------
CHAIN_ID = 137  # Polygon PoS

# -----------------------------
# Trading Parameters
# -----------------------------
TRADE_SIZE = Decimal("1000")          # 1,000 USDC borrowed per attempt
MIN_GROSS_PROFIT = Decimal("2.0")     # $2 gross before gas is even estimated

# -----------------------------
# Flash Loan Configuration
# -----------------------------
FLASH_LOAN_FEE_BPS = 9                # 0.09% of principal

# -----------------------------
# Gas Configuration
# -----------------------------
GAS_LIMIT_BUFFER = 50_000             # gas units added on top of the estimate
NATIVE_TOKEN_PRICE = Decimal("0.50")  # USDC per MATIC, converts gas cost

# -----------------------------
# Timing
# -----------------------------
SCAN_INTERVAL_SECONDS = 15.0
RPC_TIMEOUT_SECONDS = 10.0
RECEIPT_TIMEOUT_SECONDS = 120

# -----------------------------
# Logging
# -----------------------------
LOG_LEVEL = "INFO"
LOG_DIR = BASE_DIR / "logs"

REQUIRED_ENV_VARS = ("ALCHEMY_URL", "BOT_PRIVATE_KEY", "CONTRACT_ADDRESS")


class ConfigError(RuntimeError):
    """Raised when the bot cannot be started with the given configuration"""


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration, built once at startup"""
    rpc_url: str
    private_key: str
    contract_address: str
    chain_id: int = CHAIN_ID
    trade_size: Decimal = TRADE_SIZE
    min_gross_profit: Decimal = MIN_GROSS_PROFIT
    flash_loan_fee_bps: int = FLASH_LOAN_FEE_BPS
    gas_limit_buffer: int = GAS_LIMIT_BUFFER
    native_token_price: Decimal = NATIVE_TOKEN_PRICE
    scan_interval_seconds: float = SCAN_INTERVAL_SECONDS
    rpc_timeout_seconds: float = RPC_TIMEOUT_SECONDS
    receipt_timeout_seconds: int = RECEIPT_TIMEOUT_SECONDS
    dry_run: bool = False
    log_level: str = LOG_LEVEL

    def masked_summary(self) -> dict:
        """Settings safe to write to logs (no private key)"""
        return {
            "rpc_url": self.rpc_url.split("/v2/")[0],
            "contract_address": self.contract_address,
            "chain_id": self.chain_id,
            "trade_size": str(self.trade_size),
            "min_gross_profit": str(self.min_gross_profit),
            "flash_loan_fee_bps": self.flash_loan_fee_bps,
            "gas_limit_buffer": self.gas_limit_buffer,
            "native_token_price": str(self.native_token_price),
            "scan_interval_seconds": self.scan_interval_seconds,
            "dry_run": self.dry_run,
        }


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_decimal(name: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if not value.is_finite() or value < 0:
        raise ConfigError(f"{name} must be a non-negative number, got {raw!r}")
    return value


def _parse_positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {raw!r}")
    return value


def load_settings(
    env_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from the environment.

    A .env file is loaded first when present (``config/.env`` by default);
    variables already set in the process environment win, so CI secrets
    override local files. Pass ``environ`` to read from a plain mapping
    instead of ``os.environ``.

    Raises:
        ConfigError: a required variable is missing or a value is malformed
    """
    if environ is None:
        env_file = Path(env_path) if env_path else ENV_PATH
        if env_path and not env_file.exists():
            raise ConfigError(f".env file not found at {env_file}")
        if env_file.exists():
            load_dotenv(env_file)
        environ = os.environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        raise ConfigError(
            f"Environment variables not set: {', '.join(missing)}"
        )

    return Settings(
        rpc_url=environ["ALCHEMY_URL"],
        private_key=environ["BOT_PRIVATE_KEY"],
        contract_address=environ["CONTRACT_ADDRESS"],
        native_token_price=_parse_decimal(
            "NATIVE_TOKEN_PRICE",
            environ.get("NATIVE_TOKEN_PRICE", str(NATIVE_TOKEN_PRICE)),
        ),
        scan_interval_seconds=_parse_positive_float(
            "SCAN_INTERVAL_SECONDS",
            environ.get("SCAN_INTERVAL_SECONDS", str(SCAN_INTERVAL_SECONDS)),
        ),
        rpc_timeout_seconds=_parse_positive_float(
            "RPC_TIMEOUT",
            environ.get("RPC_TIMEOUT", str(RPC_TIMEOUT_SECONDS)),
        ),
        dry_run=_parse_bool("DRY_RUN", environ.get("DRY_RUN", "false")),
        log_level=environ.get("LOG_LEVEL", LOG_LEVEL).upper(),
    )
