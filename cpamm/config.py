"""Program configuration for the AMM."""

import os
from dataclasses import dataclass

from cpamm.constants import AMM_PROGRAM_ID, LP_DECIMALS
from cpamm.math.constant_product import Rounding

_TRUE_VALUES = ("true", "1", "yes")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


@dataclass(frozen=True)
class AmmConfig:
    """Centralized configuration for the AMM program.

    Holds the program identity and the behaviour flags that resolve open
    choices in the pool rules, so tests can run the same instructions under
    different policies.

    Attributes:
        program_id: Key the pool's derived addresses are computed under
        lp_decimals: Decimals of the LP mint created at initialization (default: 6)
        validate_fee_on_initialize: If True, reject fee_bps >= 10_000 when the
            pool is created. If False, accept it and let swap math fail on use.
        check_product_invariant: If True, verify R_x * R_y did not decrease
            after each swap before committing.
        deposit_rounding: Rounding of steady-state deposit amounts (default: floor)
    """

    program_id: str = AMM_PROGRAM_ID
    lp_decimals: int = LP_DECIMALS

    # Behavior flags
    validate_fee_on_initialize: bool = True
    check_product_invariant: bool = True
    deposit_rounding: Rounding = Rounding.FLOOR

    @classmethod
    def from_env(cls) -> "AmmConfig":
        """Build a config from CPAMM_* environment variables.

        - CPAMM_PROGRAM_ID: program key (default: built-in id)
        - CPAMM_VALIDATE_FEE: reject out-of-range fees at initialize (default: true)
        - CPAMM_CHECK_PRODUCT: verify the product after swaps (default: true)
        - CPAMM_DEPOSIT_ROUNDING: "floor" or "ceil" (default: floor)
        """
        return cls(
            program_id=os.environ.get("CPAMM_PROGRAM_ID", AMM_PROGRAM_ID),
            validate_fee_on_initialize=_env_flag("CPAMM_VALIDATE_FEE", True),
            check_product_invariant=_env_flag("CPAMM_CHECK_PRODUCT", True),
            deposit_rounding=Rounding(os.environ.get("CPAMM_DEPOSIT_ROUNDING", "floor").lower()),
        )


# Default configuration instance
DEFAULT_AMM_CONFIG = AmmConfig()
