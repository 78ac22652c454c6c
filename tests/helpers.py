"""Plain helpers shared by the test modules"""
from decimal import Decimal
from unittest.mock import MagicMock

from polyarb.pairs import DEXES

QUICK_ROUTER = DEXES["quickswap"].router
SUSHI_ROUTER = DEXES["sushiswap"].router
CONTRACT_ADDRESS = "0x" + "22" * 20
SENDER = "0x" + "11" * 20

# 10,000 gwei: 100_000 gas costs exactly 1 MATIC
GAS_PRICE_WEI = 10 ** 13


def usdc(amount) -> int:
    """Human USDC/USDT amount -> 6-decimal base units"""
    return int(Decimal(str(amount)) * 10 ** 6)


def make_router(address, quote=None, error=None):
    """
    Router double. ``quote(amount_in, path)`` returns the amounts list;
    ``error`` makes every call raise instead.
    """
    router = MagicMock()
    router.address = address

    def get_amounts_out(amount_in, path):
        call = MagicMock()
        if error is not None:
            call.call.side_effect = error
        else:
            call.call.return_value = quote(amount_in, list(path))
        return call

    router.functions.getAmountsOut.side_effect = get_amounts_out
    return router


def fixed_amounts(*amounts):
    return lambda amount_in, path: [usdc(a) for a in amounts]


def priced(rates):
    """Single-hop quote from a {token_in: rate} table"""
    def quote(amount_in, path):
        rate = Decimal(rates[path[0]])
        return [amount_in, int(Decimal(amount_in) * rate)]
    return quote
