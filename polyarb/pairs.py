# polyarb/pairs.py
"""
Token & DEX Registry for Polygon
Only the stablecoin pair and the two V2 routers the bot trades on
"""

from web3 import Web3
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

# =============================================================================
# TOKEN ADDRESSES (Polygon Mainnet - All Checksummed)
# =============================================================================

USDC = Web3.to_checksum_address("0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174")  # USDC.e
USDT = Web3.to_checksum_address("0xc2132D05D31c914a87C6611C10748AEb04B58e8F")

NATIVE_DECIMALS = 18  # MATIC

# =============================================================================
# TOKEN METADATA
# =============================================================================

@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str
    decimals: int


TOKENS: Dict[str, TokenInfo] = {
    USDC: TokenInfo(USDC, "USDC", 6),
    USDT: TokenInfo(USDT, "USDT", 6),
}

# =============================================================================
# DEX ROUTER ADDRESSES
# =============================================================================

@dataclass(frozen=True)
class DexInfo:
    name: str
    router: str


DEXES: Dict[str, DexInfo] = {
    "quickswap": DexInfo(
        name="QuickSwap",
        router=Web3.to_checksum_address("0xa5E0829CaCEd8fFDD4De3c43696c57F7D7A678ff"),
    ),
    "sushiswap": DexInfo(
        name="SushiSwap",
        router=Web3.to_checksum_address("0x1b02dA8Cb0d097eB8D57A175b88c7D8b47997506"),
    ),
}

# =============================================================================
# TRADING PATHS
# =============================================================================

# Borrow USDC, swap to USDT on the first DEX, swap back on the second
OUTBOUND_PATH: Tuple[str, ...] = (USDC, USDT)
RETURN_PATH: Tuple[str, ...] = (USDT, USDC)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_token_info(address: str) -> Optional[TokenInfo]:
    """Get token info by address (checksummed or not)"""
    return TOKENS.get(Web3.to_checksum_address(address))


def get_decimals(address: str) -> int:
    """Get token decimals"""
    info = get_token_info(address)
    return info.decimals if info else 18


def get_symbol(address: str) -> str:
    """Get token symbol"""
    info = get_token_info(address)
    return info.symbol if info else "UNKNOWN"


def to_base_units(amount: Decimal, token: str) -> int:
    """Human amount -> integer base units (truncates dust below 1 unit)"""
    return int(Decimal(amount) * Decimal(10 ** get_decimals(token)))


def from_base_units(amount: int, token: str) -> Decimal:
    """Integer base units -> human amount, exact"""
    return Decimal(amount) / Decimal(10 ** get_decimals(token))


def format_path(path: Sequence[str]) -> str:
    return " → ".join(get_symbol(t) for t in path)


def validate_path(path: Sequence[str]) -> List[str]:
    """
    Checksum and validate a swap path.

    A path needs at least two tokens and no hop may swap a token into itself.
    Raises ValueError otherwise.
    """
    if len(path) < 2:
        raise ValueError(f"Path needs at least 2 tokens, got {len(path)}")

    checksummed = [Web3.to_checksum_address(t) for t in path]
    for a, b in zip(checksummed, checksummed[1:]):
        if a == b:
            raise ValueError(f"Path repeats {get_symbol(a)} in consecutive hops")
    return checksummed


def validate_round_trip(outbound: Sequence[str], back: Sequence[str]) -> None:
    """
    The return path must pick up where the outbound path ends and finish
    on the borrowed token, otherwise the loan cannot be repaid.
    """
    outbound = validate_path(outbound)
    back = validate_path(back)

    if outbound[-1] != back[0]:
        raise ValueError(
            f"Return path starts with {get_symbol(back[0])}, "
            f"outbound path ends with {get_symbol(outbound[-1])}"
        )
    if outbound[0] != back[-1]:
        raise ValueError(
            f"Return path ends with {get_symbol(back[-1])}, "
            f"expected borrowed token {get_symbol(outbound[0])}"
        )
