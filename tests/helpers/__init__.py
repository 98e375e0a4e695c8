"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Participant keys, asset mints and common amounts
- factories: Ledger, program and pool factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    BOOTSTRAP_AMOUNT,
    CAROL,
    DEFAULT_FEE_BPS,
    INITIAL_BALANCE,
    ISSUER,
    MINT_X,
    MINT_Y,
    MINT_Z,
    POOL_SEED,
    TOKEN_DECIMALS,
)
from tests.helpers.factories import (
    create_mints,
    fund,
    init_pool,
    lock_pool,
    make_market,
    seed_liquidity,
    snapshot,
)

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "ISSUER",
    "MINT_X",
    "MINT_Y",
    "MINT_Z",
    "TOKEN_DECIMALS",
    "POOL_SEED",
    "DEFAULT_FEE_BPS",
    "INITIAL_BALANCE",
    "BOOTSTRAP_AMOUNT",
    # Factories
    "create_mints",
    "fund",
    "make_market",
    "init_pool",
    "seed_liquidity",
    "lock_pool",
    "snapshot",
]
