# polyarb/flash_loan.py
"""
Flash Loan Settlement Contract
Wraps the deployed arbitrage contract that borrows, swaps twice and repays
in a single transaction (reverting entirely if repayment is not covered)
"""

from web3 import Web3
from decimal import Decimal
from dataclasses import dataclass
from typing import Sequence, Tuple

from polyarb.config import FLASH_LOAN_FEE_BPS
from polyarb.quote_engine import EvaluationError

# =============================================================================
# ARBITRAGE CONTRACT ABI
# =============================================================================

ARBITRAGE_CONTRACT_ABI = [
    {
        "name": "executeFlashLoan",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_tokenToBorrow", "type": "address"},
            {"name": "_amount", "type": "uint256"},
            {"name": "_router1", "type": "address"},
            {"name": "_router2", "type": "address"},
            {"name": "_path1", "type": "address[]"},
            {"name": "_path2", "type": "address[]"},
        ],
        "outputs": [],
    },
]


class GasEstimationFailed(EvaluationError):
    """eth_estimateGas reverted: the trade would fail on-chain right now"""


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class FlashLoanParams:
    """Arguments of executeFlashLoan"""
    token: str
    amount: int  # In base units
    router_a: str
    router_b: str
    path_a: Tuple[str, ...]
    path_b: Tuple[str, ...]

    def as_args(self) -> tuple:
        return (
            Web3.to_checksum_address(self.token),
            self.amount,
            Web3.to_checksum_address(self.router_a),
            Web3.to_checksum_address(self.router_b),
            [Web3.to_checksum_address(a) for a in self.path_a],
            [Web3.to_checksum_address(a) for a in self.path_b],
        )


# =============================================================================
# SETTLEMENT CONTRACT
# =============================================================================

class FlashLoanArbitrage:
    """
    Thin handle on the arbitrage contract.

    The contract object is injected so tests can pass a double exposing
    ``functions.executeFlashLoan(...)``.
    """

    def __init__(self, contract):
        self.contract = contract

    @classmethod
    def from_address(cls, w3: Web3, address: str) -> "FlashLoanArbitrage":
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=ARBITRAGE_CONTRACT_ABI,
        )
        return cls(contract)

    @property
    def address(self) -> str:
        return self.contract.address

    def _call(self, params: FlashLoanParams):
        return self.contract.functions.executeFlashLoan(*params.as_args())

    def estimate_gas(self, params: FlashLoanParams, sender: str) -> int:
        """
        Gas the call would use if mined now.
        Raises GasEstimationFailed when the node reports a revert or errors out.
        """
        try:
            return int(self._call(params).estimate_gas({"from": sender}))
        except Exception as e:
            raise GasEstimationFailed(f"Gas estimation failed: {e}") from e

    def build_transaction(self, params: FlashLoanParams, tx_fields: dict) -> dict:
        """Build an unsigned executeFlashLoan transaction"""
        return self._call(params).build_transaction(tx_fields)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def calculate_flash_loan_fee(
    amount: Decimal,
    fee_bps: int = FLASH_LOAN_FEE_BPS,
) -> Decimal:
    """Flash loan premium on ``amount`` (human units), exact"""
    return Decimal(amount) * Decimal(fee_bps) / Decimal(10000)


def build_flash_loan_params(
    amount: int,
    router_a: str,
    router_b: str,
    path_a: Sequence[str],
    path_b: Sequence[str],
) -> FlashLoanParams:
    """The borrowed token is the first hop of the outbound path"""
    return FlashLoanParams(
        token=path_a[0],
        amount=amount,
        router_a=router_a,
        router_b=router_b,
        path_a=tuple(path_a),
        path_b=tuple(path_b),
    )
