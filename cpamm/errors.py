"""AMM error classes.

Every error aborts the whole instruction; the ledger transaction wrapping the
instruction rolls back all balance and supply changes. The ``code`` attribute
is the stable name reported to callers (and by the HTTP API).
"""


class AmmError(Exception):
    """Base error for AMM instructions."""

    code = "AmmError"


class PoolLocked(AmmError):
    """Mutation attempted while the pool is locked."""

    code = "PoolLocked"


class InvalidAmount(AmmError):
    """Zero or otherwise nonsensical amount (input or computed output)."""

    code = "InvalidAmount"


class SlippageExceeded(AmmError):
    """Computed amount violates the caller's bound."""

    code = "SlippageExceeded"


class InsufficientFunds(AmmError):
    """Caller's balance of a source asset is below the required amount."""

    code = "InsufficientFunds"


class InsufficientLiquidity(AmmError):
    """A vault lacks the reserves to source or fulfill a trade."""

    code = "InsufficientLiquidity"


class NoLiquidityInPool(AmmError):
    """Withdrawal attempted against zero LP supply."""

    code = "NoLiquidityInPool"


class ArithmeticOverflow(AmmError):
    """Overflow, underflow or division by zero in widened arithmetic."""

    code = "ArithmeticOverflow"


class InvalidFee(AmmError):
    """Swap fee must be in range [0, 10_000) basis points."""

    code = "InvalidFee"


class InvariantViolation(AmmError):
    """A pool invariant does not hold after a transition."""

    code = "InvariantViolation"


class AccountAlreadyInUse(AmmError):
    """Deterministic address is already occupied."""

    code = "AccountAlreadyInUse"


class AccountNotFound(AmmError):
    """Referenced account or mint does not exist on the ledger."""

    code = "AccountNotFound"


class InvalidAccount(AmmError):
    """Account exists but does not match the expected mint or owner."""

    code = "InvalidAccount"


class Unauthorized(AmmError):
    """Authority does not own the account or control the mint."""

    code = "Unauthorized"


class PoolNotFound(AmmError):
    """No pool is registered under the requested seed."""

    code = "PoolNotFound"
