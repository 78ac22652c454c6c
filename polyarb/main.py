# polyarb/main.py
"""
Flash Loan Arbitrage Bot Main Loop

THIS IS THE ENTRY POINT - Run with: python -m polyarb.main

Checks QuickSwap -> SushiSwap and SushiSwap -> QuickSwap for the USDC/USDT
round trip once at startup and then every SCAN_INTERVAL_SECONDS.
"""

import sys
import logging
import signal
import argparse
import dataclasses
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from web3 import Web3

from polyarb.config import ConfigError, LOG_DIR, Settings, load_settings
from polyarb.pairs import DEXES, OUTBOUND_PATH, RETURN_PATH, format_path
from polyarb.quote_engine import Venue
from polyarb.flash_loan import FlashLoanArbitrage
from polyarb.profit_calculator import OpportunityEvaluator
from polyarb.executor import ExecutionEngine, ExecutionStatus
from polyarb.arbitrage_scanner import ArbitrageScanner, ScanResult
from polyarb.rpc_health import RPCHealth, connect
from polyarb.scheduler import IntervalScheduler

logger = logging.getLogger(__name__)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(level: str = "INFO", log_dir: Optional[Path] = LOG_DIR):
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / f"bot_{datetime.now().strftime('%Y%m%d')}.log")
        )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s | %(levelname)-8s | %(message)s',
        handlers=handlers,
        force=True,
    )


# =============================================================================
# STATISTICS TRACKER
# =============================================================================

class StatisticsTracker:
    """In-memory counters for the shutdown summary"""

    def __init__(self):
        self.start_time = datetime.now()
        self.scan_count = 0
        self.routes_checked = 0
        self.route_errors = 0
        self.opportunities_found = 0
        self.trades_executed = 0
        self.trades_successful = 0
        self.trades_reverted = 0
        self.best_net_profit = Decimal(0)

    def record_scan(self, result: ScanResult):
        self.scan_count += 1
        self.routes_checked += len(result.routes)
        self.route_errors += len(result.errors)
        self.opportunities_found += len(result.opportunities)

        for route in result.opportunities:
            net = route.evaluation.net_profit
            if net > self.best_net_profit:
                self.best_net_profit = net

        for execution in result.executions:
            if execution.status == ExecutionStatus.SKIPPED:
                continue
            self.trades_executed += 1
            if execution.status == ExecutionStatus.SUCCESS:
                self.trades_successful += 1
            elif execution.status == ExecutionStatus.REVERTED:
                self.trades_reverted += 1

    def get_summary(self) -> str:
        runtime = datetime.now() - self.start_time
        success_rate = (
            self.trades_successful / self.trades_executed * 100
            if self.trades_executed > 0 else 0
        )

        return (
            f"\n{'='*60}\n"
            f"📊 BOT STATISTICS\n"
            f"{'='*60}\n"
            f"Runtime: {runtime}\n"
            f"Scans: {self.scan_count}\n"
            f"Routes Checked: {self.routes_checked} ({self.route_errors} errors)\n"
            f"Opportunities Found: {self.opportunities_found}\n"
            f"Trades Executed: {self.trades_executed}\n"
            f"Trades Successful: {self.trades_successful} ({success_rate:.1f}%)\n"
            f"Trades Reverted: {self.trades_reverted}\n"
            f"Best Net Profit: {self.best_net_profit:.6f}\n"
            f"{'='*60}\n"
        )


# =============================================================================
# MAIN BOT CLASS
# =============================================================================

class ArbitrageBot:
    """
    Owns the scheduler and the scanner; everything else is injected.
    """

    def __init__(
        self,
        settings: Settings,
        w3: Web3,
        scanner: ArbitrageScanner,
        scheduler: Optional[IntervalScheduler] = None,
    ):
        self.settings = settings
        self.w3 = w3
        self.scanner = scanner
        self.scheduler = scheduler or IntervalScheduler(settings.scan_interval_seconds)
        self.stats = StatisticsTracker()

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._handle_shutdown)
        signal.signal(signal.SIGTERM, self._handle_shutdown)

    def _handle_shutdown(self, signum, frame):
        """Handle shutdown signals gracefully"""
        logger.info("🛑 Shutdown signal received...")
        self.scheduler.stop()

    def check_prerequisites(self) -> bool:
        """Check the node before the first cycle"""
        logger.info("Checking prerequisites...")

        rpc = RPCHealth(self.w3)
        ok, status = rpc.check()
        if not ok:
            logger.warning(f"⚠️ RPC unhealthy: {status}")
        else:
            logger.info(f"✅ RPC healthy: {status}")

        try:
            chain_id = rpc.get_chain_id()
        except Exception as e:
            logger.error(f"❌ Chain ID check failed: {e}")
            return False

        if chain_id != self.settings.chain_id:
            logger.error(f"❌ Connected to chain {chain_id}, expected {self.settings.chain_id}")
            return False

        try:
            logger.info(f"Current gas price: {rpc.get_gas_price_gwei():.1f} gwei")
        except Exception as e:
            logger.warning(f"⚠️ Gas price check failed: {e}")

        logger.info("✅ All prerequisites checked")
        return True

    def run_single_scan(self) -> Optional[ScanResult]:
        """Run one cycle; errors never escape into the scheduler"""
        logger.info("-" * 40)
        logger.info(f"[{datetime.now().strftime('%H:%M:%S')}] Starting arbitrage check...")

        try:
            result = self.scanner.run_cycle()
        except Exception:
            logger.exception("Cycle error")
            return None

        self.stats.record_scan(result)
        logger.debug(f"Cycle finished in {result.scan_duration_ms:.0f}ms")
        return result

    def run(self, max_runs: Optional[int] = None):
        """
        Main bot loop
        One cycle immediately, then every scan_interval_seconds

        Once install_signal_handlers() has run, Ctrl+C only stops the
        scheduler: the current cycle finishes first, including a receipt
        wait of up to receipt_timeout_seconds. Without those handlers a
        KeyboardInterrupt ends the loop immediately.
        """
        logger.info("=" * 60)
        logger.info("🤖 Arbitrage bot started. Press Ctrl+C to stop.")
        logger.info(f"Route: {format_path(self.scanner.outbound_path)} / "
                    f"{format_path(self.scanner.return_path)}")
        logger.info(f"Trade Size: {self.scanner.trade_size}")
        logger.info(f"Settings: {self.settings.masked_summary()}")
        logger.info("=" * 60)

        try:
            self.scheduler.run(self.run_single_scan, max_runs=max_runs)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            logger.info(self.stats.get_summary())
            logger.info("Bot stopped.")


# =============================================================================
# WIRING
# =============================================================================

def build_bot(settings: Settings, w3: Optional[Web3] = None) -> ArbitrageBot:
    """
    Construct every handle once and inject it.

    Raises:
        ConfigError: node unreachable or unusable key/contract address
    """
    if w3 is None:
        logger.info("Connecting to RPC...")
        w3 = connect(settings.rpc_url, settings.rpc_timeout_seconds)

    try:
        account = w3.eth.account.from_key(settings.private_key)
    except Exception as e:
        raise ConfigError(f"BOT_PRIVATE_KEY is not a valid private key: {e}") from None

    if not Web3.is_address(settings.contract_address):
        raise ConfigError(f"CONTRACT_ADDRESS is not an address: {settings.contract_address}")

    settlement = FlashLoanArbitrage.from_address(w3, settings.contract_address)
    venues = (
        Venue.from_dex(w3, DEXES["quickswap"]),
        Venue.from_dex(w3, DEXES["sushiswap"]),
    )

    evaluator = OpportunityEvaluator(w3, settlement, settings, sender=account.address)
    executor = ExecutionEngine(w3, account, settlement, settings)
    scanner = ArbitrageScanner(
        evaluator=evaluator,
        executor=executor,
        venues=venues,
        trade_size=settings.trade_size,
        outbound_path=OUTBOUND_PATH,
        return_path=RETURN_PATH,
    )

    logger.info(f"✅ Wallet: {account.address}")
    logger.info(f"✅ Arbitrage contract: {settlement.address}")
    return ArbitrageBot(settings, w3, scanner)


# =============================================================================
# ENTRY POINT
# =============================================================================

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Polygon Flash Loan Arbitrage Bot")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single check cycle and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate normally but never send transactions",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (default: config/.env)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    try:
        settings = load_settings(env_path=args.env_file)
        if args.dry_run:
            settings = dataclasses.replace(settings, dry_run=True)
    except ConfigError as e:
        setup_logging(log_dir=None)
        logger.error(f"❌ Configuration error: {e}")
        return 1

    setup_logging(settings.log_level)

    try:
        bot = build_bot(settings)
    except ConfigError as e:
        logger.error(f"❌ Startup failed: {e}")
        return 1

    if not bot.check_prerequisites():
        logger.error("Prerequisites check failed. Exiting.")
        return 1

    bot.install_signal_handlers()
    bot.run(max_runs=1 if args.once else None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
