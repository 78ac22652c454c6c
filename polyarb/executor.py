# polyarb/executor.py
"""
Flash Loan Execution Engine
Sends the executeFlashLoan transaction for a profitable evaluation and
reports how it ended
"""

import threading
import time
import logging
from web3 import Web3
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from polyarb.config import Settings
from polyarb.flash_loan import FlashLoanArbitrage
from polyarb.profit_calculator import OpportunityEvaluation

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS & DATA CLASSES
# =============================================================================

class ExecutionStatus(Enum):
    SUCCESS = "success"
    REVERTED = "reverted"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of an arbitrage execution attempt"""
    status: ExecutionStatus
    route: str
    tx_hash: Optional[str] = None
    gas_used: int = 0
    block_number: Optional[int] = None
    error: str = ""
    execution_time_ms: float = 0

    @property
    def submitted(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS


# =============================================================================
# EXECUTION ENGINE
# =============================================================================

class ExecutionEngine:
    """
    Submits one flash loan transaction per profitable evaluation.

    Submission is fire-and-wait: the call blocks until the receipt arrives
    or the wait times out. A lock keeps a single transaction in flight so
    the signer's nonce is never reused. Failed or reverted transactions are
    reported, never retried.
    """

    def __init__(
        self,
        w3: Web3,
        account,
        settlement: FlashLoanArbitrage,
        settings: Settings,
    ):
        self.w3 = w3
        self.account = account
        self.address = Web3.to_checksum_address(account.address)
        self.settlement = settlement
        self.settings = settings
        self._submit_lock = threading.Lock()

    def _get_nonce(self) -> int:
        """Get current nonce (pending)"""
        return self.w3.eth.get_transaction_count(self.address, "pending")

    def gas_limit_for(self, evaluation: OpportunityEvaluation) -> int:
        """Estimated gas plus a flat safety buffer"""
        return evaluation.gas_cost.gas_units + self.settings.gas_limit_buffer

    def execute(self, evaluation: OpportunityEvaluation) -> ExecutionResult:
        route = evaluation.route

        if not evaluation.should_execute or evaluation.gas_cost is None:
            return ExecutionResult(
                status=ExecutionStatus.SKIPPED,
                route=route,
                error=f"Not profitable: {evaluation.reason}",
            )

        gas_limit = self.gas_limit_for(evaluation)

        if self.settings.dry_run:
            logger.info(
                f"   - DRY RUN - would send executeFlashLoan "
                f"(gas limit {gas_limit}, {evaluation.gas_cost.gas_price_gwei:.1f} gwei)"
            )
            return ExecutionResult(
                status=ExecutionStatus.SKIPPED,
                route=route,
                error="Dry run mode enabled",
            )

        with self._submit_lock:
            return self._submit(evaluation, gas_limit)

    def _submit(self, evaluation: OpportunityEvaluation, gas_limit: int) -> ExecutionResult:
        start_time = time.time()
        route = evaluation.route
        tx_hash = None

        try:
            tx = self.settlement.build_transaction(
                evaluation.flash_loan_params,
                {
                    "from": self.address,
                    "nonce": self._get_nonce(),
                    "gas": gas_limit,
                    "gasPrice": evaluation.gas_cost.gas_price_wei,
                    "chainId": self.settings.chain_id,
                },
            )

            signed = self.account.sign_transaction(tx)
            raw_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hash = Web3.to_hex(raw_hash)

            logger.info(f"   - Transaction sent: {tx_hash}")

            receipt = self.w3.eth.wait_for_transaction_receipt(
                raw_hash, timeout=self.settings.receipt_timeout_seconds
            )

        except Exception as e:
            logger.error(f"   - ❗ Execution failed ({route}): {e}")
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                route=route,
                tx_hash=tx_hash,
                error=str(e),
                execution_time_ms=(time.time() - start_time) * 1000,
            )

        execution_time = (time.time() - start_time) * 1000

        if receipt["status"] != 1:
            logger.warning(f"   - ❌ Transaction reverted: {tx_hash}")
            return ExecutionResult(
                status=ExecutionStatus.REVERTED,
                route=route,
                tx_hash=tx_hash,
                gas_used=receipt["gasUsed"],
                block_number=receipt["blockNumber"],
                error="Transaction reverted",
                execution_time_ms=execution_time,
            )

        logger.info(f"   - ✅ Transaction executed successfully! Hash: {tx_hash}")

        return ExecutionResult(
            status=ExecutionStatus.SUCCESS,
            route=route,
            tx_hash=tx_hash,
            gas_used=receipt["gasUsed"],
            block_number=receipt["blockNumber"],
            execution_time_ms=execution_time,
        )
