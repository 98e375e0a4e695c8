"""Pydantic models for AMM instructions, events and queries."""

from cpamm.models.instructions import DepositArgs, InitializeArgs, SwapArgs, WithdrawArgs
from cpamm.models.results import (
    DepositReceipt,
    PoolState,
    SwapEvent,
    SwapQuote,
    SwapReceipt,
    WithdrawReceipt,
)
from cpamm.models.types import U16, U64, Pubkey

__all__ = [
    # Types
    "Pubkey",
    "U16",
    "U64",
    # Instruction parameters
    "InitializeArgs",
    "DepositArgs",
    "SwapArgs",
    "WithdrawArgs",
    # Outcomes and queries
    "DepositReceipt",
    "SwapReceipt",
    "WithdrawReceipt",
    "SwapEvent",
    "SwapQuote",
    "PoolState",
]
