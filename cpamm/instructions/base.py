"""Shared account resolution for pool instructions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cpamm.errors import AccountNotFound, InvalidAccount, PoolLocked, PoolNotFound, Unauthorized
from cpamm.ledger.address import (
    find_config_address,
    get_associated_token_address,
    is_program_address,
)
from cpamm.ledger.authority import LedgerAuthority, Signer
from cpamm.models.types import normalize_key
from cpamm.state import PoolAddresses, PoolConfig

if TYPE_CHECKING:
    from cpamm.config import AmmConfig
    from cpamm.ledger.accounts import TokenAccount
    from cpamm.ledger.ledger import ReserveLedger


@dataclass
class PoolAccounts:
    """The accounts one instruction reads and writes.

    Resolved fresh for every instruction, after address and mint checks.
    """

    pool: PoolConfig
    addresses: PoolAddresses
    vault_x: TokenAccount
    vault_y: TokenAccount

    @property
    def reserve_x(self) -> int:
        return self.vault_x.amount

    @property
    def reserve_y(self) -> int:
        return self.vault_y.amount


class BaseInstruction:
    """Base class with shared instruction utilities.

    Provides pool lookup, user-account resolution and the pool's signing
    capability for the Deposit, Swap and Withdraw handlers.
    """

    def __init__(self, ledger: ReserveLedger, config: AmmConfig) -> None:
        """Initialize the handler.

        Args:
            ledger: Reserve ledger holding vaults, mints and user balances
            config: Program configuration
        """
        self.ledger = ledger
        self.config = config

    def load_pool(self, seed: int) -> PoolAccounts:
        """Resolve a pool's config and vaults from its seed.

        Raises:
            PoolNotFound: If no pool exists under seed
            InvalidAccount: If stored state disagrees with the derived addresses
        """
        config_address, _ = find_config_address(seed, self.config.program_id)
        try:
            account = self.ledger.get_program_account(config_address)
        except AccountNotFound as err:
            raise PoolNotFound(f"No pool with seed {seed}") from err

        pool = account.data
        owner = normalize_key(self.config.program_id)
        if account.owner != owner or not isinstance(pool, PoolConfig):
            raise InvalidAccount(f"Account {config_address} is not a pool config")

        addresses = PoolAddresses.derive(
            pool.seed, pool.mint_x, pool.mint_y, self.config.program_id
        )
        if addresses.config_bump != pool.config_bump or addresses.lp_bump != pool.lp_bump:
            raise InvalidAccount(f"Stored bumps do not match pool {seed}")

        return PoolAccounts(
            pool=pool,
            addresses=addresses,
            vault_x=self._token_account(addresses.vault_x, pool.mint_x, addresses.config),
            vault_y=self._token_account(addresses.vault_y, pool.mint_y, addresses.config),
        )

    def _token_account(self, address: str, mint: str, owner: str) -> TokenAccount:
        """Fetch a token account and check its mint and owner.

        Raises:
            AccountNotFound: If the account does not exist
            InvalidAccount: If mint or owner differ
        """
        account = self.ledger.get_token_account(address)
        if account.mint != normalize_key(mint):
            raise InvalidAccount(f"Account {address} holds {account.mint}, expected {mint}")
        if account.owner != normalize_key(owner):
            raise InvalidAccount(f"Account {address} owned by {account.owner}, expected {owner}")
        return account

    def _user_account(self, user: Signer, mint: str) -> TokenAccount:
        """The caller's associated token account for mint (must exist)."""
        return self._token_account(get_associated_token_address(user.key, mint), mint, user.key)

    def _user_account_or_create(self, user: Signer, mint: str) -> TokenAccount:
        """The caller's associated token account for mint, created if missing."""
        account = self.ledger.get_or_create_associated_token_account(user.key, mint)
        return self._token_account(account.address, mint, user.key)

    def _pool_authority(self, accounts: PoolAccounts) -> LedgerAuthority:
        """Signing capability of the pool's config address."""
        return self.ledger.program_authority(self.config.program_id, accounts.pool.signer_seeds)

    @staticmethod
    def _require_signer(user: Signer) -> None:
        """Reject callers whose key is a program address.

        Off-curve keys have no private key, so no verified signature can
        carry one; such addresses act only through their program.
        """
        if is_program_address(user.key):
            raise Unauthorized(f"Program address {user.key} cannot sign")

    @staticmethod
    def _require_unlocked(accounts: PoolAccounts) -> None:
        if accounts.pool.locked:
            raise PoolLocked(f"Pool {accounts.pool.seed} is locked")


__all__ = ["BaseInstruction", "PoolAccounts"]
