# polyarb/gas.py

from dataclasses import dataclass
from decimal import Decimal

from polyarb.pairs import NATIVE_DECIMALS


@dataclass(frozen=True)
class GasCost:
    """Gas cost breakdown"""
    gas_units: int
    gas_price_wei: int
    gas_cost_native: Decimal  # MATIC
    gas_cost: Decimal         # in borrowed-token units
    native_price: Decimal

    @property
    def gas_price_gwei(self) -> Decimal:
        return Decimal(self.gas_price_wei) / Decimal(10**9)


def estimate_gas_cost(
    *,
    gas_units: int,
    gas_price_wei: int,
    native_price: Decimal,
) -> GasCost:

    gas_cost_wei = gas_units * gas_price_wei
    gas_cost_native = Decimal(gas_cost_wei) / Decimal(10 ** NATIVE_DECIMALS)

    return GasCost(
        gas_units=gas_units,
        gas_price_wei=gas_price_wei,
        gas_cost_native=gas_cost_native,
        gas_cost=gas_cost_native * native_price,
        native_price=native_price,
    )
