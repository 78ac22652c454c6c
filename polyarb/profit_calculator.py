# polyarb/profit_calculator.py
"""
Opportunity Evaluator
Prices both legs of a round trip, subtracts gas and flash loan fees and
decides whether the trade is worth sending
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, getcontext
from typing import Optional, Sequence, Tuple

from web3 import Web3

from polyarb.config import Settings
from polyarb.flash_loan import (
    FlashLoanArbitrage, FlashLoanParams,
    build_flash_loan_params, calculate_flash_loan_fee,
)
from polyarb.gas import GasCost, estimate_gas_cost
from polyarb.pairs import from_base_units, to_base_units
from polyarb.quote_engine import EvaluationError, Quote, Venue

getcontext().prec = 50
logger = logging.getLogger(__name__)


class FeeRateUnavailable(EvaluationError):
    """The node did not return a gas price"""


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class OpportunityEvaluation:
    """Everything learned about one route in one cycle"""
    source: Venue
    destination: Venue
    outbound_path: Tuple[str, ...]
    return_path: Tuple[str, ...]

    # Input
    trade_size: Decimal
    trade_amount: int  # trade_size in base units

    # Quotes
    outbound_quote: Quote
    return_quote: Quote

    # Gross profit (signed, borrowed-token units)
    gross_profit: Decimal

    # Costs (None when gross profit did not clear the threshold)
    gas_cost: Optional[GasCost] = None
    flash_loan_fee: Optional[Decimal] = None

    # Net profit
    net_profit: Optional[Decimal] = None

    # Decision
    should_execute: bool = False
    reason: str = ""

    @property
    def route(self) -> str:
        return f"{self.source.name} -> {self.destination.name}"

    @property
    def network_fee(self) -> Optional[Decimal]:
        return self.gas_cost.gas_cost if self.gas_cost else None

    @property
    def total_costs(self) -> Optional[Decimal]:
        if self.gas_cost is None or self.flash_loan_fee is None:
            return None
        return self.gas_cost.gas_cost + self.flash_loan_fee

    @property
    def flash_loan_params(self) -> FlashLoanParams:
        return build_flash_loan_params(
            amount=self.trade_amount,
            router_a=self.source.address,
            router_b=self.destination.address,
            path_a=self.outbound_path,
            path_b=self.return_path,
        )


# =============================================================================
# OPPORTUNITY EVALUATOR
# =============================================================================

class OpportunityEvaluator:
    """
    Decides whether a source -> destination round trip pays for itself.

    Gas is only estimated once the gross profit clears ``min_gross_profit``;
    most cycles stop after the two quotes.
    """

    def __init__(
        self,
        w3: Web3,
        settlement: FlashLoanArbitrage,
        settings: Settings,
        sender: str,
    ):
        self.w3 = w3
        self.settlement = settlement
        self.settings = settings
        self.sender = sender

    def evaluate(
        self,
        source: Venue,
        destination: Venue,
        trade_size: Decimal,
        outbound_path: Sequence[str],
        return_path: Sequence[str],
    ) -> OpportunityEvaluation:
        """
        Evaluate one ordering.

        Raises:
            QuoteUnavailable: either leg could not be priced
            FeeRateUnavailable: gas price query failed
            GasEstimationFailed: the contract call would revert
        """
        borrow_token = outbound_path[0]
        trade_amount = to_base_units(trade_size, borrow_token)

        # 1. Outbound leg
        outbound_quote = source.quote(trade_amount, outbound_path)

        # 2. Return leg, fed with exactly what the outbound leg produced
        return_quote = destination.quote(outbound_quote.amount_out, return_path)

        # 3. Gross profit
        gross_profit = from_base_units(
            return_quote.amount_out - trade_amount, borrow_token
        )

        base = dict(
            source=source,
            destination=destination,
            outbound_path=tuple(outbound_path),
            return_path=tuple(return_path),
            trade_size=Decimal(trade_size),
            trade_amount=trade_amount,
            outbound_quote=outbound_quote,
            return_quote=return_quote,
            gross_profit=gross_profit,
        )

        # 4. Short-circuit: not worth an estimateGas round trip
        if gross_profit <= self.settings.min_gross_profit:
            return OpportunityEvaluation(
                **base,
                should_execute=False,
                reason=(
                    f"Gross profit {gross_profit} <= threshold "
                    f"{self.settings.min_gross_profit}"
                ),
            )

        # 5. Costs
        params = build_flash_loan_params(
            amount=trade_amount,
            router_a=source.address,
            router_b=destination.address,
            path_a=outbound_path,
            path_b=return_path,
        )
        gas_cost = self.estimate_network_fee(params)
        flash_loan_fee = calculate_flash_loan_fee(
            Decimal(trade_size), self.settings.flash_loan_fee_bps
        )

        # 6. Net profit
        net_profit = gross_profit - (gas_cost.gas_cost + flash_loan_fee)

        # 7. Decision
        should_execute = net_profit > 0
        reason = (
            f"Net profit {net_profit} after costs"
            if should_execute
            else f"Net profit {net_profit} not positive after costs"
        )

        return OpportunityEvaluation(
            **base,
            gas_cost=gas_cost,
            flash_loan_fee=flash_loan_fee,
            net_profit=net_profit,
            should_execute=should_execute,
            reason=reason,
        )

    def estimate_network_fee(self, params: FlashLoanParams) -> GasCost:
        """Current gas price x estimated gas, in borrowed-token units"""
        try:
            gas_price = int(self.w3.eth.gas_price)
        except Exception as e:
            raise FeeRateUnavailable(f"Gas price query failed: {e}") from e

        gas_units = self.settlement.estimate_gas(params, self.sender)

        return estimate_gas_cost(
            gas_units=gas_units,
            gas_price_wei=gas_price,
            native_price=self.settings.native_token_price,
        )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def format_profit_breakdown(evaluation: OpportunityEvaluation, symbol: str = "USDC") -> str:
    """Format the cost breakdown of an evaluation for logging"""
    lines = [f"   - Gross profit: {evaluation.gross_profit:.6f} {symbol}"]

    if evaluation.gas_cost is not None:
        gas = evaluation.gas_cost
        lines.append(
            f"   - Estimated gas cost: {gas.gas_cost_native:.6f} MATIC "
            f"({gas.gas_units} gas @ {gas.gas_price_gwei:.1f} gwei "
            f"≈ {gas.gas_cost:.6f} {symbol})"
        )
    if evaluation.flash_loan_fee is not None:
        lines.append(f"   - Flash loan fee: {evaluation.flash_loan_fee:.6f} {symbol}")
    if evaluation.net_profit is not None:
        lines.append(f"   - Estimated net profit: {evaluation.net_profit:.6f} {symbol}")

    return "\n".join(lines)
