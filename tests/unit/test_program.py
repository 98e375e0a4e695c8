"""Tests for AmmProgram dispatch, queries and event delivery."""

import threading

import pytest
from structlog.testing import capture_logs

from cpamm import program as program_module
from cpamm.config import AmmConfig
from cpamm.errors import InvalidAmount, PoolNotFound, SlippageExceeded, Unauthorized
from cpamm.ledger import Signer, get_associated_token_address
from cpamm.models.instructions import DepositArgs, InitializeArgs, SwapArgs, WithdrawArgs
from cpamm.program import AmmProgram, get_default_program
from tests.helpers import (
    ALICE,
    BOB,
    CAROL,
    MINT_X,
    MINT_Y,
    POOL_SEED,
    lock_pool,
    seed_liquidity,
    snapshot,
)


def swap_args(amount_in, min_amount_out=0, x_to_y=True):
    return SwapArgs(amount_in=amount_in, min_amount_out=min_amount_out, x_to_y=x_to_y)


class TestProgramConstruction:
    """Tests for program defaults."""

    def test_defaults(self):
        """A bare program gets an empty ledger and the default config."""
        program = AmmProgram()
        assert program.config == AmmConfig()
        assert program.seeds == []
        assert program.events == []

    def test_default_program_is_singleton(self, monkeypatch):
        """get_default_program builds one instance and reuses it."""
        monkeypatch.setattr(program_module, "_default_program", None)
        first = get_default_program()
        assert get_default_program() is first

    def test_default_program_reads_environment(self, monkeypatch):
        """The default program picks up CPAMM_* settings."""
        monkeypatch.setattr(program_module, "_default_program", None)
        monkeypatch.setenv("CPAMM_DEPOSIT_ROUNDING", "ceil")
        monkeypatch.setenv("CPAMM_CHECK_PRODUCT", "false")
        config = get_default_program().config
        assert config.deposit_rounding == "ceil"
        assert config.check_product_invariant is False


class TestQueries:
    """Tests for read-only queries."""

    def test_unknown_seed(self, program):
        """Queries on a missing pool raise PoolNotFound."""
        with pytest.raises(PoolNotFound):
            program.pool_state(1)
        with pytest.raises(PoolNotFound):
            program.get_pool(1)

    def test_get_pool_returns_copy(self, program, pool):
        """Mutating the returned record does not touch the stored one."""
        record = program.get_pool(pool)
        record.locked = True
        assert program.get_pool(pool).locked is False

    def test_quote_swap_matches_execution(self, program, funded_pool):
        """A quote predicts the executed output and does not mutate."""
        quote = program.quote_swap(funded_pool, 1000, x_to_y=True)
        assert (quote.amount_out, quote.fee) == (996, 3)
        assert program.pool_state(funded_pool).reserve_x == 1_000_000

        receipt = program.swap(funded_pool, Signer(BOB), swap_args(1000))
        assert receipt.amount_out == quote.amount_out

    def test_quote_swap_rejects_dust(self, program, funded_pool):
        """Quotes apply the same validation as swaps."""
        with pytest.raises(InvalidAmount):
            program.quote_swap(funded_pool, 1, x_to_y=True)

    def test_quote_deposit_and_withdraw(self, program, funded_pool):
        """Liquidity quotes use current reserves and supply."""
        deposit_quote = program.quote_deposit(funded_pool, 100_000, 10**9, 10**9)
        withdraw_quote = program.quote_withdraw(funded_pool, 100_000)
        assert (deposit_quote.amount_x, deposit_quote.amount_y) == (100_000, 100_000)
        assert (withdraw_quote.amount_x, withdraw_quote.amount_y) == (100_000, 100_000)

    def test_queries_work_on_locked_pool(self, program, funded_pool):
        """Locking blocks instructions but not reads."""
        lock_pool(program)
        assert program.pool_state(funded_pool).locked is True
        assert program.quote_deposit(funded_pool, 10, 100, 100).amount_x == 10
        assert program.balance_of(ALICE, MINT_X) > 0

    def test_balance_of_unknown_account(self, program):
        """Missing accounts report zero."""
        assert program.balance_of("0x" + "d0" * 32, MINT_X) == 0


class TestEvents:
    """Tests for swap event delivery."""

    def test_subscribers_receive_committed_events(self, program, funded_pool, events):
        """Every subscriber sees each committed swap once, in order."""
        second: list = []
        program.subscribe(second.append)

        program.swap(funded_pool, Signer(BOB), swap_args(1000))
        program.swap(funded_pool, Signer(BOB), swap_args(2000, x_to_y=False))

        assert [e.amount_in for e in events] == [1000, 2000]
        assert second == events

    def test_deposits_emit_no_events(self, program, funded_pool):
        """Only swaps produce events."""
        assert program.events == []


class TestCallerAuthority:
    """Tests that pool addresses cannot act as callers."""

    def test_pool_address_cannot_deposit_swap_or_withdraw(self, program, funded_pool):
        """The pool's own config address is refused and nothing changes."""
        state = program.pool_state(funded_pool)
        pool_signer = Signer(state.config)
        before = snapshot(program, users=(ALICE, state.config))

        with pytest.raises(Unauthorized):
            program.deposit(
                funded_pool,
                pool_signer,
                DepositArgs(
                    lp_amount=state.lp_supply, max_x=state.reserve_x, max_y=state.reserve_y
                ),
            )
        with pytest.raises(Unauthorized):
            program.swap(funded_pool, pool_signer, swap_args(1000))
        with pytest.raises(Unauthorized):
            program.withdraw(
                funded_pool, pool_signer, WithdrawArgs(lp_amount=1, min_x=0, min_y=0)
            )

        assert snapshot(program, users=(ALICE, state.config)) == before
        assert program.events == []

    def test_liquidity_stays_fully_backed(self, program, funded_pool):
        """After a refused pool-address deposit, the provider still redeems everything."""
        state = program.pool_state(funded_pool)
        with pytest.raises(Unauthorized):
            program.deposit(
                funded_pool,
                Signer(state.config),
                DepositArgs(lp_amount=1_000_000, max_x=1_000_000, max_y=1_000_000),
            )

        receipt = program.withdraw(
            funded_pool, Signer(ALICE), WithdrawArgs(lp_amount=1_000_000, min_x=0, min_y=0)
        )
        assert (receipt.amount_x, receipt.amount_y) == (1_000_000, 1_000_000)

    def test_program_address_cannot_initialize(self, program):
        """Initializers must be able to sign."""
        with pytest.raises(Unauthorized):
            program.initialize(
                Signer(get_associated_token_address(ALICE, MINT_X)),
                InitializeArgs(seed=7, fee_bps=30, mint_x=MINT_X, mint_y=MINT_Y),
            )
        assert program.seeds == []


class TestFailureLogging:
    """Tests for structured logging of rejected instructions."""

    def test_failed_instruction_logged(self, program, funded_pool):
        """A rejected instruction is logged at warning level with its error code."""
        with capture_logs() as logs:
            with pytest.raises(SlippageExceeded):
                program.swap(funded_pool, Signer(BOB), swap_args(1000, min_amount_out=997))

        failures = [log for log in logs if log["event"] == "instruction_failed"]
        assert len(failures) == 1
        assert failures[0]["log_level"] == "warning"
        assert failures[0]["instruction"] == "swap"
        assert failures[0]["error"] == "SlippageExceeded"
        assert failures[0]["seed"] == POOL_SEED

    def test_successful_swap_logged(self, program, funded_pool):
        """Executed swaps are logged with their amounts."""
        with capture_logs() as logs:
            program.swap(funded_pool, Signer(BOB), swap_args(1000))

        executed = [log for log in logs if log["event"] == "swap_executed"]
        assert executed[0]["amount_out"] == 996


class TestDepositLogging:
    """Tests for structured deposit logs."""

    def test_bootstrap_flag(self, program, pool):
        """Only the deposit into an empty pool is logged as a bootstrap."""
        with capture_logs() as logs:
            seed_liquidity(program, seed=pool)
            program.deposit(
                pool,
                Signer(CAROL),
                DepositArgs(lp_amount=500_000, max_x=10**9, max_y=10**9),
            )

        deposits = [log for log in logs if log["event"] == "liquidity_deposited"]
        assert [log["bootstrap"] for log in deposits] == [True, False]
        assert deposits[1]["amount_x"] == 500_000


class TestConcurrency:
    """Tests for serialized execution across threads."""

    def test_parallel_swaps_keep_reserves_consistent(self, program, funded_pool):
        """Concurrent swaps are applied one at a time; totals balance."""
        traders = [BOB, CAROL]
        errors: list = []

        def trade(user):
            try:
                for _ in range(20):
                    program.swap(funded_pool, Signer(user), swap_args(1000))
                    program.swap(funded_pool, Signer(user), swap_args(1000, x_to_y=False))
            except Exception as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=trade, args=(user,)) for user in traders]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(program.events) == 80
        state = program.pool_state(funded_pool)
        assert state.reserve_x * state.reserve_y > 1_000_000 * 1_000_000
        assert program.events[-1].reserve_x == state.reserve_x
        assert program.events[-1].reserve_y == state.reserve_y
