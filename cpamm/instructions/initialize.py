"""Initialize: create a pool's config, LP mint and vaults."""

from __future__ import annotations

import structlog

from cpamm.constants import BPS_DENOMINATOR
from cpamm.errors import AccountAlreadyInUse, InvalidAccount, InvalidFee
from cpamm.instructions.base import BaseInstruction
from cpamm.ledger.authority import Signer
from cpamm.models.instructions import InitializeArgs
from cpamm.state import PoolAddresses, PoolConfig

logger = structlog.get_logger()


class InitializeHandler(BaseInstruction):
    """Creates a pool under a creator-chosen seed.

    The config account, LP mint and both vaults all sit at addresses derived
    from the seed, so a second Initialize with the same seed fails. The LP
    mint authority and the vault owner are the config address, which only
    the program can sign for.
    """

    def initialize(self, initializer: Signer, args: InitializeArgs) -> PoolConfig:
        """Create the pool.

        Args:
            initializer: Caller creating (and paying for) the pool
            args: Seed, fee, optional authority and the two asset mints

        Returns:
            The stored PoolConfig

        Raises:
            Unauthorized: If initializer is a program address
            AccountNotFound: If either asset mint does not exist
            InvalidAccount: If both assets are the same mint
            InvalidFee: If fee_bps >= 10_000 and fee validation is enabled
            AccountAlreadyInUse: If a pool with this seed already exists
        """
        self._require_signer(initializer)
        mint_x = self.ledger.get_mint(args.mint_x)
        mint_y = self.ledger.get_mint(args.mint_y)
        if mint_x.address == mint_y.address:
            raise InvalidAccount("Pool assets must be two different mints")

        if args.fee_bps >= BPS_DENOMINATOR:
            if self.config.validate_fee_on_initialize:
                raise InvalidFee(f"fee_bps must be below {BPS_DENOMINATOR}, got {args.fee_bps}")
            logger.warning("fee_out_of_range_accepted", seed=args.seed, fee_bps=args.fee_bps)

        addresses = PoolAddresses.derive(
            args.seed, mint_x.address, mint_y.address, self.config.program_id
        )
        if self.ledger.exists(addresses.config):
            raise AccountAlreadyInUse(f"Pool with seed {args.seed} already exists")

        pool = PoolConfig(
            seed=args.seed,
            authority=args.authority,
            mint_x=mint_x.address,
            mint_y=mint_y.address,
            fee_bps=args.fee_bps,
            locked=False,
            config_bump=addresses.config_bump,
            lp_bump=addresses.lp_bump,
        )

        self.ledger.create_program_account(addresses.config, self.config.program_id, pool)
        self.ledger.create_mint(addresses.mint_lp, self.config.lp_decimals, addresses.config)
        self.ledger.create_token_account(addresses.vault_x, mint_x.address, addresses.config)
        self.ledger.create_token_account(addresses.vault_y, mint_y.address, addresses.config)

        logger.info(
            "pool_initialized",
            seed=args.seed,
            fee_bps=args.fee_bps,
            initializer=initializer.key[-8:],
            config=addresses.config[-8:],
        )
        return pool
