"""Constant-product automated market maker over a reserve ledger."""

__version__ = "0.1.0"

from cpamm.config import DEFAULT_AMM_CONFIG, AmmConfig  # noqa: E402
from cpamm.errors import AmmError  # noqa: E402
from cpamm.ledger import ReserveLedger, Signer  # noqa: E402
from cpamm.program import AmmProgram, get_default_program  # noqa: E402

__all__ = [
    "__version__",
    "AmmConfig",
    "AmmError",
    "AmmProgram",
    "DEFAULT_AMM_CONFIG",
    "ReserveLedger",
    "Signer",
    "get_default_program",
]
