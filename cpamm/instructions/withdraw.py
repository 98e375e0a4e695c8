"""Withdraw: burn LP units for a proportional share of both reserves."""

from __future__ import annotations

import structlog

from cpamm.errors import (
    InsufficientFunds,
    InsufficientLiquidity,
    InvalidAmount,
    NoLiquidityInPool,
    SlippageExceeded,
)
from cpamm.instructions.base import BaseInstruction
from cpamm.ledger.address import get_associated_token_address
from cpamm.ledger.authority import Signer
from cpamm.math.constant_product import withdraw_amounts
from cpamm.models.instructions import WithdrawArgs
from cpamm.models.results import WithdrawReceipt

logger = structlog.get_logger()


class WithdrawHandler(BaseInstruction):
    """Handles liquidity withdrawals.

    The provider burns LP units with their own signature; the vault
    transfers are signed by the pool.
    """

    def withdraw(self, seed: int, user: Signer, args: WithdrawArgs) -> WithdrawReceipt:
        """Burn lp_amount from user and pay out floor-proportional reserves.

        Raises:
            Unauthorized: If user is a program address
            PoolLocked: If the pool is locked
            InvalidAmount: If lp_amount is zero or a payout rounds to zero
            InsufficientFunds: If user holds fewer than lp_amount LP units
            NoLiquidityInPool: If LP supply is zero
            SlippageExceeded: If x < min_x or y < min_y
            InsufficientLiquidity: If a vault cannot cover its payout
        """
        self._require_signer(user)
        accounts = self.load_pool(seed)
        self._require_unlocked(accounts)
        if args.lp_amount == 0:
            raise InvalidAmount("LP amount must be greater than zero")

        mint_lp = self.ledger.get_mint(accounts.addresses.mint_lp)
        user_lp_address = get_associated_token_address(user.key, mint_lp.address)
        lp_balance = self.ledger.balance(user_lp_address)
        if lp_balance < args.lp_amount:
            raise InsufficientFunds(f"LP balance {lp_balance} < {args.lp_amount}")
        if mint_lp.supply == 0:
            raise NoLiquidityInPool("Pool has no LP supply")

        x, y = withdraw_amounts(
            accounts.reserve_x, accounts.reserve_y, mint_lp.supply, args.lp_amount
        )

        if x < args.min_x or y < args.min_y:
            raise SlippageExceeded(f"Withdraw pays ({x}, {y}), min ({args.min_x}, {args.min_y})")
        if x == 0 or y == 0:
            raise InvalidAmount(f"Burning {args.lp_amount} LP pays nothing of one asset")
        if accounts.reserve_x < x or accounts.reserve_y < y:
            raise InsufficientLiquidity(
                f"Vaults hold ({accounts.reserve_x}, {accounts.reserve_y}) < ({x}, {y})"
            )

        user_lp = self._user_account(user, mint_lp.address)
        user_x = self._user_account_or_create(user, accounts.pool.mint_x)
        user_y = self._user_account_or_create(user, accounts.pool.mint_y)

        self.ledger.burn(mint_lp.address, user_lp.address, args.lp_amount, user)
        pool_authority = self._pool_authority(accounts)
        self.ledger.transfer(accounts.vault_x.address, user_x.address, x, pool_authority)
        self.ledger.transfer(accounts.vault_y.address, user_y.address, y, pool_authority)

        logger.info(
            "liquidity_withdrawn",
            seed=seed,
            user=user.key[-8:],
            lp_amount=args.lp_amount,
            amount_x=x,
            amount_y=y,
        )
        return WithdrawReceipt(lp_amount=args.lp_amount, amount_x=x, amount_y=y)
