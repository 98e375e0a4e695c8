"""Pytest configuration and fixtures."""

import pytest

from cpamm.ledger import ReserveLedger
from cpamm.program import AmmProgram
from tests.helpers import POOL_SEED, create_mints, init_pool, make_market, seed_liquidity


@pytest.fixture
def ledger() -> ReserveLedger:
    """Empty ledger with the X, Y and Z test mints."""
    ledger = ReserveLedger()
    create_mints(ledger)
    return ledger


@pytest.fixture
def program() -> AmmProgram:
    """Program over a ledger where ALICE, BOB and CAROL hold both assets."""
    return make_market()


@pytest.fixture
def pool(program: AmmProgram) -> int:
    """Initialized (empty) X/Y pool at 30 bps. Returns its seed."""
    init_pool(program)
    return POOL_SEED


@pytest.fixture
def funded_pool(program: AmmProgram, pool: int) -> int:
    """Pool bootstrapped by ALICE with 1_000_000 of each asset. Returns its seed."""
    seed_liquidity(program, pool)
    return pool


@pytest.fixture
def events(program: AmmProgram) -> list:
    """Swap events delivered to a subscriber of the program."""
    received: list = []
    program.subscribe(received.append)
    return received
