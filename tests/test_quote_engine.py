"""
Tests for polyarb/quote_engine.py and polyarb/pairs.py
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from polyarb.pairs import (
    DEXES, USDC, USDT, format_path, from_base_units, get_decimals, get_symbol,
    get_token_info, to_base_units, validate_path, validate_round_trip,
)
from polyarb.quote_engine import (
    EvaluationError, Quote, QuoteUnavailable, ROUTER_V2_ABI, Venue,
)
from tests.helpers import QUICK_ROUTER, fixed_amounts, make_router, usdc


class TestVenueQuote:
    def test_quote_returns_every_hop(self):
        venue = Venue("QuickSwap", make_router(QUICK_ROUTER, fixed_amounts(1000, 998)))

        quote = venue.quote(usdc(1000), [USDC, USDT])

        assert isinstance(quote, Quote)
        assert quote.dex == "QuickSwap"
        assert quote.path == (USDC, USDT)
        assert quote.amounts == (usdc(1000), usdc(998))
        assert quote.amount_in == usdc(1000)
        assert quote.amount_out == usdc(998)

    def test_path_is_checksummed_before_the_call(self):
        router = make_router(QUICK_ROUTER, fixed_amounts(1000, 998))
        venue = Venue("QuickSwap", router)

        venue.quote(usdc(1000), [USDC.lower(), USDT.lower()])

        router.functions.getAmountsOut.assert_called_once_with(usdc(1000), [USDC, USDT])

    def test_router_revert_becomes_quote_unavailable(self):
        venue = Venue(
            "SushiSwap",
            make_router(QUICK_ROUTER, error=ValueError("UniswapV2Library: INSUFFICIENT_LIQUIDITY")),
        )

        with pytest.raises(QuoteUnavailable) as exc_info:
            venue.quote(usdc(1000), [USDC, USDT])

        err = exc_info.value
        assert isinstance(err, EvaluationError)
        assert err.venue == "SushiSwap"
        assert err.path == (USDC, USDT)
        assert "INSUFFICIENT_LIQUIDITY" in str(err)
        assert "USDC → USDT" in str(err)

    def test_mismatched_amounts_length(self):
        venue = Venue("QuickSwap", make_router(QUICK_ROUTER, fixed_amounts(1000)))

        with pytest.raises(QuoteUnavailable, match="expected 2 amounts"):
            venue.quote(usdc(1000), [USDC, USDT])

    def test_negative_amount_rejected(self):
        router = make_router(QUICK_ROUTER, lambda amount_in, path: [amount_in, -1])
        venue = Venue("QuickSwap", router)

        with pytest.raises(QuoteUnavailable, match="negative"):
            venue.quote(usdc(1000), [USDC, USDT])

    def test_quote_is_immutable(self):
        venue = Venue("QuickSwap", make_router(QUICK_ROUTER, fixed_amounts(1000, 998)))
        quote = venue.quote(usdc(1000), [USDC, USDT])

        with pytest.raises(AttributeError):
            quote.amounts = (0, 0)

    def test_from_dex_builds_router_contract(self):
        w3 = MagicMock()

        venue = Venue.from_dex(w3, DEXES["sushiswap"])

        w3.eth.contract.assert_called_once_with(
            address=DEXES["sushiswap"].router, abi=ROUTER_V2_ABI
        )
        assert venue.name == "SushiSwap"
        assert venue.router is w3.eth.contract.return_value


class TestTokenHelpers:
    def test_registry_lookups(self):
        assert get_symbol(USDC) == "USDC"
        assert get_symbol(USDT.lower()) == "USDT"
        assert get_decimals(USDC) == 6
        assert get_symbol("0x" + "33" * 20) == "UNKNOWN"
        assert get_decimals("0x" + "33" * 20) == 18

    def test_token_info_lookup(self):
        assert get_token_info(USDC.lower()).symbol == "USDC"
        assert get_token_info("0x" + "33" * 20) is None

    def test_unit_conversion(self):
        assert to_base_units(Decimal("1000"), USDC) == 1_000_000_000
        assert to_base_units(Decimal("0.0000019"), USDC) == 1
        assert from_base_units(5_000_000, USDC) == Decimal("5")
        assert from_base_units(-1, USDT) == Decimal("-0.000001")

    def test_format_path(self):
        assert format_path([USDC, USDT, USDC]) == "USDC → USDT → USDC"


class TestPathValidation:
    def test_valid_path_is_checksummed(self):
        assert validate_path([USDC.lower(), USDT.lower()]) == [USDC, USDT]

    def test_too_short(self):
        with pytest.raises(ValueError, match="at least 2"):
            validate_path([USDC])

    def test_consecutive_duplicates(self):
        with pytest.raises(ValueError, match="consecutive"):
            validate_path([USDC, USDC])

    def test_round_trip_ok(self):
        validate_round_trip([USDC, USDT], [USDT, USDC])

    def test_round_trip_disconnected(self):
        with pytest.raises(ValueError, match="starts with"):
            validate_round_trip([USDC, USDT], [USDC, USDT])

    def test_round_trip_must_return_borrowed_token(self):
        other = "0x" + "44" * 20
        with pytest.raises(ValueError, match="borrowed token"):
            validate_round_trip([USDC, USDT], [USDT, other])
