# polyarb/__init__.py
"""
Polygon Flash Loan Arbitrage Bot
QuickSwap <-> SushiSwap round trips funded by a flash loan

Modules:
- config: Configuration and environment
- pairs: Token and DEX registry
- quote_engine: Venue quotes (getAmountsOut)
- gas: Gas cost math
- flash_loan: Settlement contract wrapper and flash loan fee
- profit_calculator: Opportunity evaluation
- executor: Transaction submission
- arbitrage_scanner: One check cycle over both orderings
- scheduler: Fixed-interval ticker
- rpc_health: Web3 connection and health check
- main: Entry point
"""

__version__ = "1.0.0"

from polyarb.config import (
    CHAIN_ID,
    ConfigError,
    Settings,
    load_settings,
)

from polyarb.pairs import (
    USDC,
    USDT,
    DEXES,
)

__all__ = [
    "CHAIN_ID",
    "ConfigError",
    "Settings",
    "load_settings",
    "USDC",
    "USDT",
    "DEXES",
]
