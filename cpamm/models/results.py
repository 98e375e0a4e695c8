"""Pydantic models for instruction outcomes, events and read-only queries."""

from pydantic import BaseModel, Field

from cpamm.models.types import U16, U64, Pubkey


class SwapEvent(BaseModel):
    """Emitted after every successful swap, carrying post-trade reserves."""

    seed: U64 = Field(description="Seed of the pool that traded.")
    user: Pubkey = Field(description="Caller that swapped.")
    amount_in: U64 = Field(alias="amountIn")
    amount_out: U64 = Field(alias="amountOut")
    x_to_y: bool = Field(alias="xToY")
    reserve_x: U64 = Field(alias="reserveX", description="Vault X balance after the swap.")
    reserve_y: U64 = Field(alias="reserveY", description="Vault Y balance after the swap.")

    model_config = {"populate_by_name": True}


class DepositReceipt(BaseModel):
    """Amounts moved by a successful deposit."""

    lp_amount: U64 = Field(alias="lpAmount")
    amount_x: U64 = Field(alias="amountX")
    amount_y: U64 = Field(alias="amountY")

    model_config = {"populate_by_name": True}


class SwapReceipt(BaseModel):
    """Amounts moved by a successful swap."""

    amount_in: U64 = Field(alias="amountIn")
    amount_out: U64 = Field(alias="amountOut")
    x_to_y: bool = Field(alias="xToY")

    model_config = {"populate_by_name": True}


class WithdrawReceipt(BaseModel):
    """Amounts moved by a successful withdrawal."""

    lp_amount: U64 = Field(alias="lpAmount")
    amount_x: U64 = Field(alias="amountX")
    amount_y: U64 = Field(alias="amountY")

    model_config = {"populate_by_name": True}


class SwapQuote(BaseModel):
    """Curve answer for a prospective swap on current reserves."""

    amount_in: U64 = Field(alias="amountIn")
    amount_out: U64 = Field(alias="amountOut")
    fee: U64 = Field(description="Input retained by the pool as fee.")
    x_to_y: bool = Field(alias="xToY")

    model_config = {"populate_by_name": True}


class PoolState(BaseModel):
    """Read-only view of a pool: config, addresses, reserves and supply."""

    seed: U64
    authority: Pubkey | None = None
    mint_x: Pubkey = Field(alias="mintX")
    mint_y: Pubkey = Field(alias="mintY")
    fee_bps: U16 = Field(alias="feeBps")
    locked: bool
    config: Pubkey
    mint_lp: Pubkey = Field(alias="mintLp")
    vault_x: Pubkey = Field(alias="vaultX")
    vault_y: Pubkey = Field(alias="vaultY")
    reserve_x: U64 = Field(alias="reserveX")
    reserve_y: U64 = Field(alias="reserveY")
    lp_supply: U64 = Field(alias="lpSupply")

    model_config = {"populate_by_name": True}
