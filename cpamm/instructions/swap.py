"""Swap: exact-input trade against the constant-product curve."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from cpamm.errors import (
    InsufficientFunds,
    InsufficientLiquidity,
    InvalidAmount,
    InvariantViolation,
    SlippageExceeded,
)
from cpamm.instructions.base import BaseInstruction
from cpamm.ledger.authority import Signer
from cpamm.math.constant_product import constant_product_holds, swap_amount_out
from cpamm.models.instructions import SwapArgs
from cpamm.models.results import SwapEvent, SwapReceipt

if TYPE_CHECKING:
    from cpamm.config import AmmConfig
    from cpamm.ledger.ledger import ReserveLedger

logger = structlog.get_logger()


class SwapHandler(BaseInstruction):
    """Handles swaps in either direction.

    Checks run in a fixed order (lock, amount, caller balance, liquidity,
    slippage, zero output, destination reserve) so the reported error is
    deterministic for a given request.
    """

    def __init__(
        self,
        ledger: ReserveLedger,
        config: AmmConfig,
        emit: Callable[[SwapEvent], None] | None = None,
    ) -> None:
        """Initialize the swap handler.

        Args:
            ledger: Reserve ledger holding vaults, mints and user balances
            config: Program configuration
            emit: Receives the SwapEvent of every successful swap. If None,
                  events are only logged.
        """
        super().__init__(ledger, config)
        self.emit = emit

    def swap(self, seed: int, user: Signer, args: SwapArgs) -> SwapReceipt:
        """Sell amount_in of the source asset for the destination asset.

        Raises:
            Unauthorized: If user is a program address
            PoolLocked: If the pool is locked
            InvalidAmount: If amount_in is zero or the output rounds to zero
            InsufficientFunds: If user holds less than amount_in
            InsufficientLiquidity: If a reserve is empty or cannot cover the output
            SlippageExceeded: If the output is below min_amount_out
            InvariantViolation: If the reserve product decreased
        """
        self._require_signer(user)
        accounts = self.load_pool(seed)
        self._require_unlocked(accounts)
        if args.amount_in == 0:
            raise InvalidAmount("Swap amount must be greater than zero")

        pool = accounts.pool
        if args.x_to_y:
            mint_src, mint_dst = pool.mint_x, pool.mint_y
            vault_src, vault_dst = accounts.vault_x, accounts.vault_y
        else:
            mint_src, mint_dst = pool.mint_y, pool.mint_x
            vault_src, vault_dst = accounts.vault_y, accounts.vault_x

        user_src = self._user_account(user, mint_src)
        if user_src.amount < args.amount_in:
            raise InsufficientFunds(f"Balance {user_src.amount} < {args.amount_in}")

        if vault_src.amount == 0 or vault_dst.amount == 0:
            raise InsufficientLiquidity("Pool has no liquidity")

        reserve_x_before, reserve_y_before = accounts.reserve_x, accounts.reserve_y
        amount_out = swap_amount_out(
            vault_src.amount, vault_dst.amount, args.amount_in, pool.fee_bps
        )

        if amount_out < args.min_amount_out:
            raise SlippageExceeded(f"Output {amount_out} below minimum {args.min_amount_out}")
        if amount_out == 0:
            raise InvalidAmount(f"Swap of {args.amount_in} produces no output")
        if vault_dst.amount < amount_out:
            raise InsufficientLiquidity(f"Vault holds {vault_dst.amount} < {amount_out}")

        user_dst = self._user_account_or_create(user, mint_dst)
        self.ledger.transfer(user_src.address, vault_src.address, args.amount_in, user)
        self.ledger.transfer(
            vault_dst.address, user_dst.address, amount_out, self._pool_authority(accounts)
        )

        reserve_x, reserve_y = accounts.reserve_x, accounts.reserve_y
        if self.config.check_product_invariant and not constant_product_holds(
            reserve_x_before, reserve_y_before, reserve_x, reserve_y
        ):
            raise InvariantViolation(
                f"Product decreased: ({reserve_x_before}, {reserve_y_before})"
                f" -> ({reserve_x}, {reserve_y})"
            )

        event = SwapEvent(
            seed=seed,
            user=user.key,
            amount_in=args.amount_in,
            amount_out=amount_out,
            x_to_y=args.x_to_y,
            reserve_x=reserve_x,
            reserve_y=reserve_y,
        )
        logger.info(
            "swap_executed",
            seed=seed,
            user=user.key[-8:],
            amount_in=args.amount_in,
            amount_out=amount_out,
            x_to_y=args.x_to_y,
            reserve_x=reserve_x,
            reserve_y=reserve_y,
        )
        if self.emit is not None:
            self.emit(event)

        return SwapReceipt(amount_in=args.amount_in, amount_out=amount_out, x_to_y=args.x_to_y)
