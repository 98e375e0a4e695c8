"""Liquidity math for the AMM.

This package provides the pure, integer-only curve functions:
- deposit / withdraw proportional splits (with the bootstrap case)
- exact-input swap output under a constant-product curve with a bps fee
"""

from cpamm.math.constant_product import (
    Rounding,
    constant_product,
    constant_product_holds,
    deposit_amounts,
    effective_amount_in,
    fee_amount,
    fee_multiplier,
    swap_amount_out,
    swap_out,
    withdraw_amounts,
)

__all__ = [
    "Rounding",
    "constant_product",
    "constant_product_holds",
    "deposit_amounts",
    "effective_amount_in",
    "fee_amount",
    "fee_multiplier",
    "swap_amount_out",
    "swap_out",
    "withdraw_amounts",
]
