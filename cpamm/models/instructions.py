"""Pydantic models for instruction parameters.

Field names follow the program's snake_case arguments; the wire format used
by the HTTP API is camelCase (populate_by_name accepts both).
"""

from pydantic import BaseModel, Field

from cpamm.models.types import U16, U64, Pubkey


class InitializeArgs(BaseModel):
    """Create a pool for (mint_x, mint_y) under seed."""

    seed: U64 = Field(description="Pool identity discriminator.")
    fee_bps: U16 = Field(alias="feeBps", description="Swap fee in basis points.")
    authority: Pubkey | None = Field(
        default=None,
        description="Optional key reserved for privileged pool actions.",
    )
    mint_x: Pubkey = Field(alias="mintX", description="Mint of asset X.")
    mint_y: Pubkey = Field(alias="mintY", description="Mint of asset Y.")

    model_config = {"populate_by_name": True}


class DepositArgs(BaseModel):
    """Mint lp_amount LP units, paying at most (max_x, max_y)."""

    lp_amount: U64 = Field(alias="lpAmount", description="LP units to mint.")
    max_x: U64 = Field(alias="maxX", description="Maximum asset X to pay.")
    max_y: U64 = Field(alias="maxY", description="Maximum asset Y to pay.")

    model_config = {"populate_by_name": True}


class SwapArgs(BaseModel):
    """Sell amount_in of one asset for at least min_amount_out of the other."""

    amount_in: U64 = Field(alias="amountIn", description="Exact input amount.")
    min_amount_out: U64 = Field(alias="minAmountOut", description="Minimum output accepted.")
    x_to_y: bool = Field(alias="xToY", description="True to sell X for Y.")

    model_config = {"populate_by_name": True}


class WithdrawArgs(BaseModel):
    """Burn lp_amount LP units, receiving at least (min_x, min_y)."""

    lp_amount: U64 = Field(alias="lpAmount", description="LP units to burn.")
    min_x: U64 = Field(alias="minX", description="Minimum asset X to receive.")
    min_y: U64 = Field(alias="minY", description="Minimum asset Y to receive.")

    model_config = {"populate_by_name": True}
