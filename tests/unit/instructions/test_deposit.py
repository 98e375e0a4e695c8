"""Tests for the Deposit instruction."""

import pytest

from cpamm.config import AmmConfig
from cpamm.errors import (
    AccountNotFound,
    InsufficientFunds,
    InvalidAmount,
    PoolLocked,
    PoolNotFound,
    SlippageExceeded,
)
from cpamm.ledger import Signer
from cpamm.math import Rounding
from cpamm.models.instructions import DepositArgs
from tests.helpers import (
    ALICE,
    BOB,
    BOOTSTRAP_AMOUNT,
    INITIAL_BALANCE,
    MINT_X,
    MINT_Y,
    POOL_SEED,
    fund,
    init_pool,
    lock_pool,
    make_market,
    seed_liquidity,
    snapshot,
)

DAVE = "0x" + "e2" * 32  # On-curve key outside the default market


def deposit(program, user, lp_amount, max_x, max_y, seed=POOL_SEED):
    return program.deposit(
        seed, Signer(user), DepositArgs(lp_amount=lp_amount, max_x=max_x, max_y=max_y)
    )


class TestBootstrapDeposit:
    """Tests for the first deposit into an empty pool."""

    def test_sets_reserves_to_maximums(self, program, pool):
        """The first provider's maximums become the reserves."""
        receipt = deposit(program, ALICE, 500, 2000, 8000)

        assert (receipt.amount_x, receipt.amount_y, receipt.lp_amount) == (2000, 8000, 500)
        state = program.pool_state(pool)
        assert (state.reserve_x, state.reserve_y, state.lp_supply) == (2000, 8000, 500)

    def test_moves_balances(self, program, funded_pool):
        """Assets leave the provider and LP units arrive."""
        state = program.pool_state(funded_pool)
        assert program.balance_of(ALICE, MINT_X) == INITIAL_BALANCE - BOOTSTRAP_AMOUNT
        assert program.balance_of(ALICE, MINT_Y) == INITIAL_BALANCE - BOOTSTRAP_AMOUNT
        assert program.balance_of(ALICE, state.mint_lp) == BOOTSTRAP_AMOUNT

    @pytest.mark.parametrize("maxes", [(0, 1000), (1000, 0)])
    def test_zero_maximum_raises(self, program, pool, maxes):
        """Bootstrap requires both assets."""
        with pytest.raises(InvalidAmount):
            deposit(program, ALICE, 100, *maxes)
        assert program.pool_state(pool).lp_supply == 0


class TestProportionalDeposit:
    """Tests for deposits into a pool with liquidity."""

    def test_pays_proportional_amounts(self, program, funded_pool):
        """Minting 10% of supply costs 10% of each reserve."""
        receipt = deposit(program, BOB, 100_000, 200_000, 200_000)

        assert (receipt.amount_x, receipt.amount_y) == (100_000, 100_000)
        state = program.pool_state(funded_pool)
        assert (state.reserve_x, state.reserve_y) == (1_100_000, 1_100_000)
        assert state.lp_supply == 1_100_000

    def test_creates_lp_account(self, program, funded_pool):
        """A provider without an LP account gets one."""
        mint_lp = program.pool_state(funded_pool).mint_lp
        assert program.balance_of(BOB, mint_lp) == 0

        deposit(program, BOB, 1000, 1000, 1000)

        assert program.balance_of(BOB, mint_lp) == 1000

    def test_uneven_reserves(self, program):
        """Each amount follows its own reserve."""
        init_pool(program)
        seed_liquidity(program, amount_x=3000, amount_y=9000, lp_amount=1000)

        receipt = deposit(program, BOB, 10, 100, 100)

        assert (receipt.amount_x, receipt.amount_y) == (30, 90)

    def test_floor_rounding(self, program):
        """Amounts round down by default."""
        init_pool(program)
        seed_liquidity(program, amount_x=10, amount_y=10, lp_amount=3)

        receipt = deposit(program, BOB, 1, 100, 100)

        assert (receipt.amount_x, receipt.amount_y) == (3, 3)

    def test_ceil_rounding(self):
        """CEIL rounding, when configured, rounds amounts up."""
        program = make_market(AmmConfig(deposit_rounding=Rounding.CEIL))
        init_pool(program)
        seed_liquidity(program, amount_x=10, amount_y=10, lp_amount=3)

        receipt = deposit(program, BOB, 1, 100, 100)

        assert (receipt.amount_x, receipt.amount_y) == (4, 4)

    def test_cost_equal_to_maximums_accepted(self, program, funded_pool):
        """Maximums are inclusive bounds."""
        receipt = deposit(program, BOB, 250_000, 250_000, 250_000)
        assert (receipt.amount_x, receipt.amount_y) == (250_000, 250_000)


class TestDepositRejections:
    """Tests for Deposit failure cases."""

    def test_slippage_exceeded(self, program, funded_pool):
        """A cost above max_x fails and moves nothing."""
        before = snapshot(program)
        with pytest.raises(SlippageExceeded):
            deposit(program, BOB, 100_000, 99_999, 200_000)
        assert snapshot(program) == before

    def test_slippage_on_y(self, program, funded_pool):
        """A cost above max_y fails too."""
        with pytest.raises(SlippageExceeded):
            deposit(program, BOB, 100_000, 200_000, 99_999)

    def test_zero_lp_amount(self, program, funded_pool):
        """Zero LP amount is an InvalidAmount."""
        with pytest.raises(InvalidAmount):
            deposit(program, BOB, 0, 100, 100)

    def test_too_small_for_reserves(self, program):
        """LP units cannot be minted for nothing."""
        init_pool(program)
        seed_liquidity(program, amount_x=10, amount_y=BOOTSTRAP_AMOUNT, lp_amount=BOOTSTRAP_AMOUNT)
        with pytest.raises(InvalidAmount):
            deposit(program, BOB, 1, 100, 100)

    def test_locked_pool(self, program, funded_pool):
        """Deposits into a locked pool fail and move nothing."""
        lock_pool(program)
        before = snapshot(program)
        with pytest.raises(PoolLocked):
            deposit(program, BOB, 1000, 1000, 1000)
        assert snapshot(program) == before

    def test_insufficient_funds_rolls_back_first_transfer(self, program, funded_pool):
        """If Y cannot be paid, the X transfer is undone."""
        fund(program.ledger, DAVE, MINT_X, 1_000_000)
        fund(program.ledger, DAVE, MINT_Y, 10)
        before = snapshot(program, users=(DAVE,))

        with pytest.raises(InsufficientFunds):
            deposit(program, DAVE, 100, 1000, 1000)

        assert snapshot(program, users=(DAVE,)) == before
        assert program.balance_of(DAVE, MINT_X) == 1_000_000

    def test_missing_source_account(self, program, funded_pool):
        """A provider must hold accounts for both assets."""
        fund(program.ledger, DAVE, MINT_X, 1000)
        with pytest.raises(AccountNotFound):
            deposit(program, DAVE, 100, 1000, 1000)

    def test_unknown_pool(self, program):
        """Depositing into a seed with no pool is PoolNotFound."""
        with pytest.raises(PoolNotFound):
            deposit(program, ALICE, 100, 100, 100, seed=999)
