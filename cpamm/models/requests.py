"""HTTP request bodies.

Each body is the instruction's parameters plus the key of the caller that
signs it. Signature checks are done upstream of the API; a key that is a
program address cannot have signed, so it is rejected here.

Not re-exported from cpamm.models: these bodies depend on the ledger's
address derivation, which itself imports cpamm.models.types.
"""

from typing import Annotated

from pydantic import AfterValidator, Field

from cpamm.ledger.address import is_program_address
from cpamm.models.instructions import DepositArgs, InitializeArgs, SwapArgs, WithdrawArgs
from cpamm.models.types import Pubkey


def _validate_signer_key(value: str) -> str:
    if is_program_address(value):
        raise ValueError(f"Program address {value} cannot sign requests")
    return value


# Caller key: a Pubkey that lies on the ed25519 curve
SignerKey = Annotated[Pubkey, AfterValidator(_validate_signer_key)]


class InitializeRequest(InitializeArgs):
    initializer: SignerKey = Field(description="Key of the pool creator.")


class DepositRequest(DepositArgs):
    user: SignerKey = Field(description="Key of the liquidity provider.")


class SwapRequest(SwapArgs):
    user: SignerKey = Field(description="Key of the trader.")


class WithdrawRequest(WithdrawArgs):
    user: SignerKey = Field(description="Key of the liquidity provider.")
