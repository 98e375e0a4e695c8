"""AMM program: instruction dispatch, atomicity and read-only queries.

AmmProgram is the entry point for pool instructions. Each instruction runs
inside one ledger transaction: the handler's transfers, mints and burns and
the post-instruction invariant checks either all commit or all roll back.
Swap events are published only after their transaction commits.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable
from typing import TypeVar

import structlog

from cpamm.config import DEFAULT_AMM_CONFIG, AmmConfig
from cpamm.errors import AmmError
from cpamm.instructions import (
    BaseInstruction,
    DepositHandler,
    InitializeHandler,
    SwapHandler,
    WithdrawHandler,
)
from cpamm.ledger.address import get_associated_token_address
from cpamm.ledger.authority import Signer
from cpamm.ledger.ledger import ReserveLedger
from cpamm.math.constant_product import (
    deposit_amounts,
    fee_amount,
    swap_out,
    withdraw_amounts,
)
from cpamm.models.instructions import DepositArgs, InitializeArgs, SwapArgs, WithdrawArgs
from cpamm.models.results import (
    DepositReceipt,
    PoolState,
    SwapEvent,
    SwapQuote,
    SwapReceipt,
    WithdrawReceipt,
)
from cpamm.state import PoolConfig

logger = structlog.get_logger()

T = TypeVar("T")

EventListener = Callable[[SwapEvent], None]


class AmmProgram:
    """Runs pool instructions against a reserve ledger.

    Multiple pools coexist on one ledger, each addressed by its seed. The
    program serializes instructions with a lock; the ledger transaction
    gives each one all-or-nothing semantics.

    Args:
        ledger: Ledger holding mints and balances. If None, starts empty.
        config: Program configuration. If None, uses DEFAULT_AMM_CONFIG.
    """

    def __init__(
        self,
        ledger: ReserveLedger | None = None,
        config: AmmConfig | None = None,
    ) -> None:
        self.ledger = ledger if ledger is not None else ReserveLedger()
        self.config = config if config is not None else DEFAULT_AMM_CONFIG

        self.events: list[SwapEvent] = []
        self._pending_events: list[SwapEvent] = []
        self._listeners: list[EventListener] = []
        self._seeds: set[int] = set()
        self._lock = threading.RLock()

        self._reader = BaseInstruction(self.ledger, self.config)
        self._initialize = InitializeHandler(self.ledger, self.config)
        self._deposit = DepositHandler(self.ledger, self.config)
        self._swap = SwapHandler(self.ledger, self.config, emit=self._pending_events.append)
        self._withdraw = WithdrawHandler(self.ledger, self.config)

    # --- Events ---

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback for committed swap events."""
        self._listeners.append(listener)

    def _publish_pending(self) -> None:
        pending = list(self._pending_events)
        self._pending_events.clear()
        for event in pending:
            self.events.append(event)
            for listener in self._listeners:
                listener(event)

    # --- Execution ---

    def _execute(self, instruction: str, seed: int, action: Callable[[], T]) -> T:
        """Run action atomically; log and re-raise any AmmError."""
        with self._lock:
            try:
                with self.ledger.transaction():
                    result = action()
                    if instruction in ("deposit", "withdraw"):
                        self._check_pool_invariants(seed)
            except AmmError as err:
                self._pending_events.clear()
                logger.warning(
                    "instruction_failed",
                    instruction=instruction,
                    seed=seed,
                    error=err.code,
                    detail=str(err),
                )
                raise
            except Exception:
                self._pending_events.clear()
                raise
            self._publish_pending()
            return result

    def _check_pool_invariants(self, seed: int) -> None:
        accounts = self._reader.load_pool(seed)
        supply = self.ledger.supply(accounts.addresses.mint_lp)
        accounts.pool.check_invariants(
            accounts.reserve_x,
            accounts.reserve_y,
            supply,
            check_fee=self.config.validate_fee_on_initialize,
        )

    # --- Instructions ---

    def initialize(self, initializer: Signer, args: InitializeArgs) -> PoolConfig:
        """Create a pool. See InitializeHandler.initialize."""
        pool = self._execute(
            "initialize", args.seed, lambda: self._initialize.initialize(initializer, args)
        )
        self._seeds.add(pool.seed)
        return dataclasses.replace(pool)

    def deposit(self, seed: int, user: Signer, args: DepositArgs) -> DepositReceipt:
        """Add liquidity. See DepositHandler.deposit."""
        return self._execute("deposit", seed, lambda: self._deposit.deposit(seed, user, args))

    def swap(self, seed: int, user: Signer, args: SwapArgs) -> SwapReceipt:
        """Trade one asset for the other. See SwapHandler.swap."""
        return self._execute("swap", seed, lambda: self._swap.swap(seed, user, args))

    def withdraw(self, seed: int, user: Signer, args: WithdrawArgs) -> WithdrawReceipt:
        """Remove liquidity. See WithdrawHandler.withdraw."""
        return self._execute("withdraw", seed, lambda: self._withdraw.withdraw(seed, user, args))

    # --- Read-only queries (allowed on locked pools) ---

    @property
    def seeds(self) -> list[int]:
        """Seeds of every pool created through this program, ascending."""
        return sorted(self._seeds)

    def get_pool(self, seed: int) -> PoolConfig:
        """Copy of a pool's stored config.

        Raises:
            PoolNotFound: If no pool exists under seed
        """
        with self._lock:
            return dataclasses.replace(self._reader.load_pool(seed).pool)

    def pool_state(self, seed: int) -> PoolState:
        """Config, addresses, reserves and LP supply of a pool."""
        with self._lock:
            accounts = self._reader.load_pool(seed)
            pool, addresses = accounts.pool, accounts.addresses
            return PoolState(
                seed=pool.seed,
                authority=pool.authority,
                mint_x=pool.mint_x,
                mint_y=pool.mint_y,
                fee_bps=pool.fee_bps,
                locked=pool.locked,
                config=addresses.config,
                mint_lp=addresses.mint_lp,
                vault_x=addresses.vault_x,
                vault_y=addresses.vault_y,
                reserve_x=accounts.reserve_x,
                reserve_y=accounts.reserve_y,
                lp_supply=self.ledger.supply(addresses.mint_lp),
            )

    def quote_swap(self, seed: int, amount_in: int, x_to_y: bool) -> SwapQuote:
        """Output of a prospective swap on current reserves.

        Raises:
            InvalidAmount: If amount_in is zero or the output rounds to zero
            InsufficientLiquidity: If either reserve is zero
        """
        state = self.pool_state(seed)
        reserve_in, reserve_out = (
            (state.reserve_x, state.reserve_y) if x_to_y else (state.reserve_y, state.reserve_x)
        )
        amount_out = swap_out(reserve_in, reserve_out, amount_in, state.fee_bps)
        return SwapQuote(
            amount_in=amount_in,
            amount_out=amount_out,
            fee=fee_amount(amount_in, state.fee_bps),
            x_to_y=x_to_y,
        )

    def quote_deposit(self, seed: int, lp_amount: int, max_x: int, max_y: int) -> DepositReceipt:
        """Amounts a deposit of lp_amount would pay on current reserves."""
        state = self.pool_state(seed)
        x, y = deposit_amounts(
            state.reserve_x,
            state.reserve_y,
            state.lp_supply,
            lp_amount,
            max_x,
            max_y,
            rounding=self.config.deposit_rounding,
        )
        return DepositReceipt(lp_amount=lp_amount, amount_x=x, amount_y=y)

    def quote_withdraw(self, seed: int, lp_amount: int) -> WithdrawReceipt:
        """Amounts burning lp_amount would pay on current reserves."""
        state = self.pool_state(seed)
        x, y = withdraw_amounts(state.reserve_x, state.reserve_y, state.lp_supply, lp_amount)
        return WithdrawReceipt(lp_amount=lp_amount, amount_x=x, amount_y=y)

    def balance_of(self, owner: str, mint: str) -> int:
        """Balance of owner's associated token account for mint (0 if none)."""
        with self._lock:
            return self.ledger.balance(get_associated_token_address(owner, mint))


# Module-level program used by the API unless a dependency override is set
_default_program: AmmProgram | None = None


def get_default_program() -> AmmProgram:
    """Get the process-wide AmmProgram, creating it from the environment on first use."""
    global _default_program
    if _default_program is None:
        _default_program = AmmProgram(config=AmmConfig.from_env())
    return _default_program


__all__ = ["AmmProgram", "EventListener", "get_default_program"]
