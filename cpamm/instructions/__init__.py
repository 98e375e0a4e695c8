"""Instruction handlers for the AMM program.

Each handler validates its request, asks the curve math for amounts and
issues ledger operations. Handlers do not open transactions themselves;
AmmProgram wraps every call in one.
"""

from cpamm.instructions.base import BaseInstruction, PoolAccounts
from cpamm.instructions.deposit import DepositHandler
from cpamm.instructions.initialize import InitializeHandler
from cpamm.instructions.swap import SwapHandler
from cpamm.instructions.withdraw import WithdrawHandler

__all__ = [
    "BaseInstruction",
    "PoolAccounts",
    "InitializeHandler",
    "DepositHandler",
    "SwapHandler",
    "WithdrawHandler",
]
