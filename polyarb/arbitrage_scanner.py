# polyarb/arbitrage_scanner.py
"""
Arbitrage Scanner
Runs one check cycle: both venue orderings for the configured pair,
executing whichever one pays after costs
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
import time
import logging

from polyarb.executor import ExecutionEngine, ExecutionResult
from polyarb.pairs import get_symbol, validate_round_trip
from polyarb.profit_calculator import (
    OpportunityEvaluation, OpportunityEvaluator, format_profit_breakdown,
)
from polyarb.quote_engine import EvaluationError, Venue

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class RouteResult:
    """Outcome of one ordering within a cycle"""
    route: str
    evaluation: Optional[OpportunityEvaluation] = None
    execution: Optional[ExecutionResult] = None
    error: Optional[EvaluationError] = None

    @property
    def is_opportunity(self) -> bool:
        """Gross profit cleared the threshold and costs were estimated"""
        return self.evaluation is not None and self.evaluation.net_profit is not None


@dataclass
class ScanResult:
    """Result of an arbitrage scan cycle"""
    timestamp: float
    scan_duration_ms: float
    routes: List[RouteResult] = field(default_factory=list)

    @property
    def opportunities(self) -> List[RouteResult]:
        return [r for r in self.routes if r.is_opportunity]

    @property
    def executions(self) -> List[ExecutionResult]:
        return [r.execution for r in self.routes if r.execution is not None]

    @property
    def errors(self) -> List[RouteResult]:
        return [r for r in self.routes if r.error is not None]


# =============================================================================
# ARBITRAGE SCANNER
# =============================================================================

class ArbitrageScanner:
    """
    Two venues, one pair, two orderings per cycle.

    Orderings are evaluated one after the other and never share state; an
    error in one is logged and recorded without touching the other.
    """

    def __init__(
        self,
        evaluator: OpportunityEvaluator,
        executor: ExecutionEngine,
        venues: Tuple[Venue, Venue],
        trade_size: Decimal,
        outbound_path: Sequence[str],
        return_path: Sequence[str],
    ):
        validate_round_trip(outbound_path, return_path)
        if len(venues) != 2:
            raise ValueError(f"Expected exactly 2 venues, got {len(venues)}")

        self.evaluator = evaluator
        self.executor = executor
        self.venues = tuple(venues)
        self.trade_size = Decimal(trade_size)
        self.outbound_path = tuple(outbound_path)
        self.return_path = tuple(return_path)

    def orderings(self) -> List[Tuple[Venue, Venue]]:
        a, b = self.venues
        return [(a, b), (b, a)]

    def run_cycle(self) -> ScanResult:
        """Evaluate A -> B then B -> A"""
        start_time = time.time()

        routes = [
            self.check_and_execute(source, destination)
            for source, destination in self.orderings()
        ]

        return ScanResult(
            timestamp=start_time,
            scan_duration_ms=(time.time() - start_time) * 1000,
            routes=routes,
        )

    def check_and_execute(self, source: Venue, destination: Venue) -> RouteResult:
        """Evaluate one ordering and execute it when net-profitable"""
        route = f"{source.name} -> {destination.name}"

        try:
            evaluation = self.evaluator.evaluate(
                source,
                destination,
                self.trade_size,
                self.outbound_path,
                self.return_path,
            )
        except EvaluationError as e:
            # Routine: illiquid path, node hiccup or a revert during estimateGas
            logger.info(f"   - ❗ Error checking route {route}: {e}")
            return RouteResult(route=route, error=e)

        result = RouteResult(route=route, evaluation=evaluation)

        if evaluation.net_profit is None:
            logger.debug(f"   - ❌ No opportunity ({route}): {evaluation.reason}")
            return result

        symbol = get_symbol(self.outbound_path[0])
        logger.info(f"✅ OPPORTUNITY FOUND ({route}) ✅")
        logger.info(format_profit_breakdown(evaluation, symbol))

        if evaluation.should_execute:
            logger.info("   - Net profit positive. SENDING TRANSACTION...")
            result.execution = self.executor.execute(evaluation)
        else:
            logger.info("   - ❌ Net profit not positive after costs. Transaction not sent.")

        return result
