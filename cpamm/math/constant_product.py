"""Constant-product curve math for two-asset pools.

Formula: x * y = k, with the swap fee deducted from the input before the
curve is applied:

    amount_in_eff = floor(amount_in * (10_000 - fee_bps) / 10_000)
    amount_out    = floor(amount_in_eff * R_out / (R_in + amount_in_eff))

The fee stays in the input vault, so k grows with every trade. Every
division floors, which rounds in the pool's favour on swaps and withdrawals.

All functions are pure: they take reserves and supply as plain ints and
return plain ints. Intermediates are widened to u128 through SafeInt and
narrowed back to u64; any overflow, underflow or division by zero surfaces
as ArithmeticOverflow.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from cpamm.constants import BPS_DENOMINATOR
from cpamm.errors import (
    ArithmeticOverflow,
    InsufficientLiquidity,
    InvalidAmount,
    NoLiquidityInPool,
)
from cpamm.safe_int import S, SafeInt, SafeIntError


class Rounding(str, Enum):
    """Rounding direction for proportional deposit amounts."""

    FLOOR = "floor"
    CEIL = "ceil"


@contextmanager
def _checked(operation: str) -> Iterator[None]:
    """Translate SafeInt failures into ArithmeticOverflow."""
    try:
        yield
    except SafeIntError as err:
        raise ArithmeticOverflow(f"{operation}: {err}") from err


def _proportional(
    reserve: int,
    lp_amount: int,
    supply: int,
    rounding: Rounding = Rounding.FLOOR,
) -> int:
    """reserve * lp_amount / supply in u128, narrowed to u64."""
    numerator = S(reserve) * S(lp_amount)
    if rounding is Rounding.CEIL:
        return numerator.ceiling_div(S(supply)).to_u64()
    return (numerator // S(supply)).to_u64()


def deposit_amounts(
    reserve_x: int,
    reserve_y: int,
    supply: int,
    lp_amount: int,
    max_x: int,
    max_y: int,
    rounding: Rounding = Rounding.FLOOR,
) -> tuple[int, int]:
    """Calculate the (x, y) a depositor pays to mint lp_amount LP units.

    Bootstrap: an untouched pool (no supply, no reserves) takes the caller's
    maximums verbatim; the first depositor sets the price ratio.

    Steady state: x = R_x * lp_amount / supply and y likewise, so minting
    preserves the R_x : R_y : supply ratio.

    Args:
        reserve_x: Vault X balance
        reserve_y: Vault Y balance
        supply: Outstanding LP supply
        lp_amount: LP units to mint
        max_x: Caller's ceiling for asset X (used verbatim on bootstrap)
        max_y: Caller's ceiling for asset Y (used verbatim on bootstrap)
        rounding: Division rounding for the steady-state case

    Returns:
        Tuple of (x, y) amounts to transfer into the vaults

    Raises:
        InvalidAmount: lp_amount is zero, a bootstrap maximum is zero, the
            pool holds reserves without supply, or a computed amount is zero
        ArithmeticOverflow: Widened arithmetic overflowed
    """
    if lp_amount == 0:
        raise InvalidAmount("LP amount must be greater than zero")

    if supply == 0 and reserve_x == 0 and reserve_y == 0:
        if max_x == 0 or max_y == 0:
            raise InvalidAmount("Initial deposit requires both assets")
        return max_x, max_y

    if supply == 0:
        raise InvalidAmount("Pool holds reserves but no LP supply")

    with _checked("deposit_amounts"):
        x = _proportional(reserve_x, lp_amount, supply, rounding)
        y = _proportional(reserve_y, lp_amount, supply, rounding)

    if x == 0 or y == 0:
        raise InvalidAmount(f"LP amount {lp_amount} is too small for reserves")
    return x, y


def withdraw_amounts(
    reserve_x: int,
    reserve_y: int,
    supply: int,
    lp_amount: int,
) -> tuple[int, int]:
    """Calculate the (x, y) released by burning lp_amount LP units.

    x = floor(R_x * lp_amount / supply), y likewise. Flooring leaves any
    remainder in the pool for the remaining holders.

    Raises:
        InvalidAmount: lp_amount is zero
        NoLiquidityInPool: supply is zero
        ArithmeticOverflow: Widened arithmetic overflowed
    """
    if lp_amount == 0:
        raise InvalidAmount("LP amount must be greater than zero")
    if supply == 0:
        raise NoLiquidityInPool("Pool has no LP supply")

    with _checked("withdraw_amounts"):
        x = _proportional(reserve_x, lp_amount, supply)
        y = _proportional(reserve_y, lp_amount, supply)
    return x, y


def fee_multiplier(fee_bps: int) -> int:
    """Fee multiplier for curve math (10_000 - fee_bps).

    For 30 bps (0.3%), this returns 9970.

    Raises:
        ArithmeticOverflow: fee_bps exceeds 10_000
    """
    with _checked("fee_multiplier"):
        return (S(BPS_DENOMINATOR) - S(fee_bps)).to_u64()


def effective_amount_in(amount_in: int, fee_bps: int) -> int:
    """Input left after the fee: floor(amount_in * (10_000 - fee_bps) / 10_000)."""
    multiplier = fee_multiplier(fee_bps)
    with _checked("effective_amount_in"):
        return ((S(amount_in) * S(multiplier)) // S(BPS_DENOMINATOR)).to_u64()


def fee_amount(amount_in: int, fee_bps: int) -> int:
    """Portion of amount_in retained by the pool as fee."""
    return amount_in - effective_amount_in(amount_in, fee_bps)


def swap_amount_out(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
) -> int:
    """Raw curve output for an exact-input swap.

    Unlike swap_out(), zero results are returned rather than rejected, so
    callers can apply their own check ordering.

    Args:
        reserve_in: Reserve of the input asset
        reserve_out: Reserve of the output asset
        amount_in: Input amount, before fee
        fee_bps: Pool fee in basis points

    Returns:
        Output amount (may be zero)

    Raises:
        ArithmeticOverflow: fee_bps above 10_000, or the denominator is zero
    """
    amount_in_eff = effective_amount_in(amount_in, fee_bps)
    with _checked("swap_amount_out"):
        numerator = S(amount_in_eff) * S(reserve_out)
        denominator = S(reserve_in) + S(amount_in_eff)
        return (numerator // denominator).to_u64()


def swap_out(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
) -> int:
    """Validated exact-input swap output.

    Raises:
        InvalidAmount: amount_in is zero, or the output rounds to zero
        InsufficientLiquidity: Either reserve is zero
        ArithmeticOverflow: Widened arithmetic failed
    """
    if amount_in == 0:
        raise InvalidAmount("Swap amount must be greater than zero")
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("Pool has no liquidity")

    amount_out = swap_amount_out(reserve_in, reserve_out, amount_in, fee_bps)
    if amount_out == 0:
        raise InvalidAmount(f"Swap of {amount_in} produces no output")
    return amount_out


def constant_product(reserve_x: int, reserve_y: int) -> SafeInt:
    """k = R_x * R_y in u128."""
    with _checked("constant_product"):
        return S(reserve_x) * S(reserve_y)


def constant_product_holds(
    before_x: int,
    before_y: int,
    after_x: int,
    after_y: int,
) -> bool:
    """True if the reserve product did not decrease."""
    return constant_product(after_x, after_y) >= constant_product(before_x, before_y)


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
