# polyarb/quote_engine.py
"""
DEX Quote Source
Prices swap paths on Uniswap-V2 style routers with getAmountsOut
"""

from web3 import Web3
from dataclasses import dataclass, field
from typing import Sequence, Tuple
import time

from polyarb.pairs import DexInfo, get_symbol

# =============================================================================
# ROUTER ABI (Universal for V2 forks)
# =============================================================================

ROUTER_V2_ABI = [
    {
        "name": "getAmountsOut",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]


# =============================================================================
# ERRORS
# =============================================================================

class EvaluationError(Exception):
    """An opportunity could not be evaluated this cycle (never fatal)"""


class QuoteUnavailable(EvaluationError):
    """A venue could not price the requested path"""

    def __init__(self, venue: str, path: Sequence[str], reason: str):
        self.venue = venue
        self.path = tuple(path)
        self.reason = reason
        route = " → ".join(get_symbol(t) for t in path)
        super().__init__(f"{venue} cannot quote {route}: {reason}")


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Quote:
    """Amounts a swap yields at every hop of a path, in base units"""
    dex: str
    path: Tuple[str, ...]
    amounts: Tuple[int, ...]
    timestamp: float = field(default_factory=time.time)

    @property
    def amount_in(self) -> int:
        return self.amounts[0]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1]


# =============================================================================
# VENUE
# =============================================================================

class Venue:
    """
    A named liquidity venue backed by a V2 router contract.

    The router is injected, so anything exposing
    ``functions.getAmountsOut(amount, path).call()`` works.
    """

    def __init__(self, name: str, router):
        self.name = name
        self.router = router

    @classmethod
    def from_dex(cls, w3: Web3, dex: DexInfo) -> "Venue":
        router = w3.eth.contract(address=dex.router, abi=ROUTER_V2_ABI)
        return cls(dex.name, router)

    @property
    def address(self) -> str:
        return self.router.address

    def __repr__(self) -> str:
        return f"Venue({self.name!r})"

    def quote(self, amount_in: int, path: Sequence[str]) -> Quote:
        """
        Simulate a swap of ``amount_in`` along ``path``.

        Read-only eth_call; nothing is sent. Raises QuoteUnavailable when the
        router reverts (no pair, no liquidity), the node is unreachable, or
        the answer does not line up with the path.
        """
        checksum_path = [Web3.to_checksum_address(t) for t in path]

        try:
            amounts = self.router.functions.getAmountsOut(
                int(amount_in), checksum_path
            ).call()
        except Exception as e:
            raise QuoteUnavailable(self.name, checksum_path, str(e)) from e

        amounts = tuple(int(a) for a in amounts)

        if len(amounts) != len(checksum_path):
            raise QuoteUnavailable(
                self.name, checksum_path,
                f"expected {len(checksum_path)} amounts, got {len(amounts)}",
            )
        if any(a < 0 for a in amounts):
            raise QuoteUnavailable(self.name, checksum_path, "negative amount in quote")

        return Quote(dex=self.name, path=tuple(checksum_path), amounts=amounts)
