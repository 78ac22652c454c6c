"""
Shared fixtures: MagicMock doubles for the web3 client, V2 routers, the
arbitrage contract and the signing account. Nothing here touches a network.
"""
from decimal import Decimal
from unittest.mock import MagicMock, PropertyMock

import pytest

from polyarb.config import Settings
from polyarb.flash_loan import FlashLoanArbitrage
from polyarb.pairs import OUTBOUND_PATH, RETURN_PATH
from polyarb.profit_calculator import OpportunityEvaluator
from polyarb.quote_engine import Venue
from tests.helpers import (
    CONTRACT_ADDRESS, GAS_PRICE_WEI, QUICK_ROUTER, SENDER, SUSHI_ROUTER,
    fixed_amounts, make_router,
)


@pytest.fixture
def settings():
    return Settings(
        rpc_url="https://polygon-mainnet.g.alchemy.com/v2/secret-key",
        private_key="0x" + "01" * 32,
        contract_address=CONTRACT_ADDRESS,
        native_token_price=Decimal("1"),
    )


@pytest.fixture
def gas_price():
    return PropertyMock(return_value=GAS_PRICE_WEI)


@pytest.fixture
def w3(gas_price):
    w3 = MagicMock()
    type(w3.eth).gas_price = gas_price
    w3.eth.chain_id = 137
    w3.eth.block_number = 1_000
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    w3.eth.wait_for_transaction_receipt.return_value = {
        "status": 1,
        "gasUsed": 180_000,
        "blockNumber": 1_001,
    }
    return w3


@pytest.fixture
def settlement_contract():
    contract = MagicMock()
    contract.address = CONTRACT_ADDRESS
    call = contract.functions.executeFlashLoan.return_value
    call.estimate_gas.return_value = 150_000
    call.build_transaction.side_effect = lambda fields: dict(fields, data="0xdead")
    return contract


@pytest.fixture
def settlement(settlement_contract):
    return FlashLoanArbitrage(settlement_contract)


@pytest.fixture
def evaluator(w3, settlement, settings):
    return OpportunityEvaluator(w3, settlement, settings, sender=SENDER)


@pytest.fixture
def account():
    account = MagicMock()
    account.address = SENDER
    account.sign_transaction.return_value = MagicMock(raw_transaction=b"signed")
    return account


@pytest.fixture
def make_venue():
    def factory(name, address, quote=None, error=None):
        return Venue(name, make_router(address, quote=quote, error=error))
    return factory


@pytest.fixture
def profitable_venues(make_venue):
    """1000 USDC -> 998 USDT on QuickSwap -> 1005 USDC on SushiSwap"""
    quick = make_venue("QuickSwap", QUICK_ROUTER, fixed_amounts(1000, 998))
    sushi = make_venue("SushiSwap", SUSHI_ROUTER, fixed_amounts(998, 1005))
    return quick, sushi


@pytest.fixture
def profitable_evaluation(evaluator, profitable_venues):
    quick, sushi = profitable_venues
    return evaluator.evaluate(quick, sushi, Decimal("1000"), OUTBOUND_PATH, RETURN_PATH)
