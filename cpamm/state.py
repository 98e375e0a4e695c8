"""Pool record and derived pool addresses."""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.constants import BPS_DENOMINATOR
from cpamm.errors import InvariantViolation
from cpamm.ledger.address import (
    config_seeds,
    find_config_address,
    find_lp_mint_address,
    get_associated_token_address,
)


@dataclass
class PoolConfig:
    """Durable configuration of one pool, stored in its config account.

    Reserves and LP supply are not duplicated here: they live in the vaults
    and the LP mint on the ledger.
    """

    seed: int
    authority: str | None
    mint_x: str
    mint_y: str
    # Swap fee in basis points (30 = 0.3%)
    fee_bps: int
    locked: bool
    config_bump: int
    lp_bump: int

    @property
    def signer_seeds(self) -> list[bytes]:
        """Seeds (bump included) the pool signs vault and mint operations with."""
        return [*config_seeds(self.seed), bytes([self.config_bump])]

    def check_invariants(
        self, reserve_x: int, reserve_y: int, supply: int, *, check_fee: bool = True
    ) -> None:
        """Verify the fee range and the supply/reserve coupling.

        check_fee=False skips the fee range, for programs that accept
        out-of-range fees at initialization.

        Raises:
            InvariantViolation: If fee_bps is out of range, or supply and
                reserves disagree on whether the pool is empty
        """
        if check_fee and not 0 <= self.fee_bps < BPS_DENOMINATOR:
            raise InvariantViolation(f"fee_bps out of range: {self.fee_bps}")
        if (supply == 0) != (reserve_x == 0 and reserve_y == 0):
            raise InvariantViolation(
                f"supply={supply} inconsistent with reserves ({reserve_x}, {reserve_y})"
            )
        if supply > 0 and (reserve_x == 0 or reserve_y == 0):
            raise InvariantViolation(
                f"Supply {supply} not backed by both reserves ({reserve_x}, {reserve_y})"
            )


@dataclass(frozen=True)
class PoolAddresses:
    """Deterministic addresses of a pool's accounts."""

    config: str
    config_bump: int
    mint_lp: str
    lp_bump: int
    vault_x: str
    vault_y: str

    @classmethod
    def derive(cls, seed: int, mint_x: str, mint_y: str, program_id: str) -> PoolAddresses:
        """Derive every pool address from its seed and asset mints."""
        config, config_bump = find_config_address(seed, program_id)
        mint_lp, lp_bump = find_lp_mint_address(config, program_id)
        return cls(
            config=config,
            config_bump=config_bump,
            mint_lp=mint_lp,
            lp_bump=lp_bump,
            vault_x=get_associated_token_address(config, mint_x),
            vault_y=get_associated_token_address(config, mint_y),
        )
