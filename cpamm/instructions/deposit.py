"""Deposit: add liquidity and mint LP units to the provider."""

from __future__ import annotations

import structlog

from cpamm.errors import InvalidAmount, SlippageExceeded
from cpamm.instructions.base import BaseInstruction
from cpamm.ledger.authority import Signer
from cpamm.math.constant_product import deposit_amounts
from cpamm.models.instructions import DepositArgs
from cpamm.models.results import DepositReceipt

logger = structlog.get_logger()


class DepositHandler(BaseInstruction):
    """Handles liquidity deposits.

    The first deposit into an empty pool sets the price: the provider's
    maximums are taken as-is. Later deposits pay the amounts that keep
    R_x : R_y : supply unchanged.
    """

    def deposit(self, seed: int, user: Signer, args: DepositArgs) -> DepositReceipt:
        """Transfer (x, y) into the vaults and mint lp_amount LP units to user.

        Raises:
            Unauthorized: If user is a program address
            PoolLocked: If the pool is locked
            InvalidAmount: If lp_amount is zero or the split is degenerate
            SlippageExceeded: If x > max_x or y > max_y
            InsufficientFunds: If user cannot pay x or y
        """
        self._require_signer(user)
        accounts = self.load_pool(seed)
        self._require_unlocked(accounts)
        if args.lp_amount == 0:
            raise InvalidAmount("LP amount must be greater than zero")

        mint_lp = self.ledger.get_mint(accounts.addresses.mint_lp)
        bootstrap = mint_lp.supply == 0
        x, y = deposit_amounts(
            accounts.reserve_x,
            accounts.reserve_y,
            mint_lp.supply,
            args.lp_amount,
            args.max_x,
            args.max_y,
            rounding=self.config.deposit_rounding,
        )

        if x > args.max_x or y > args.max_y:
            raise SlippageExceeded(f"Deposit needs ({x}, {y}), max ({args.max_x}, {args.max_y})")

        user_x = self._user_account(user, accounts.pool.mint_x)
        user_y = self._user_account(user, accounts.pool.mint_y)
        user_lp = self._user_account_or_create(user, mint_lp.address)

        self.ledger.transfer(user_x.address, accounts.vault_x.address, x, user)
        self.ledger.transfer(user_y.address, accounts.vault_y.address, y, user)
        self.ledger.mint_to(
            mint_lp.address, user_lp.address, args.lp_amount, self._pool_authority(accounts)
        )

        logger.info(
            "liquidity_deposited",
            seed=seed,
            user=user.key[-8:],
            lp_amount=args.lp_amount,
            amount_x=x,
            amount_y=y,
            bootstrap=bootstrap,
        )
        return DepositReceipt(lp_amount=args.lp_amount, amount_x=x, amount_y=y)
