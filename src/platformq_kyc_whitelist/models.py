"""
Invocation models passed from the host into the registry.
"""

from typing import Optional
from dataclasses import dataclass

from .types import AccountId, PublicKey
from .utils import validate_account_id
from .crypto import verify_signature


@dataclass(frozen=True)
class CallContext:
    """
    Authenticated caller of a registry operation.

    The host authenticates the call and builds the context; the registry
    trusts it as delivered.

    - ``signer_account_id``: account that signed the call. Applicant
      operations act on this account.
    - ``signer_public_key``: key the call was signed with. Administrator
      operations compare it with the stored administrator key.
    - ``predecessor_account_id``: account that invoked the registry directly.
      Service-account checks use it. Defaults to the signer.
    """
    signer_account_id: AccountId
    signer_public_key: PublicKey
    predecessor_account_id: Optional[AccountId] = None

    def __post_init__(self):
        validate_account_id(self.signer_account_id)
        if self.predecessor_account_id is None:
            object.__setattr__(self, "predecessor_account_id", self.signer_account_id)
        else:
            validate_account_id(self.predecessor_account_id)

    @classmethod
    def from_signed_message(cls, account_id: AccountId, public_key: PublicKey,
                            message: bytes, signature: bytes) -> "CallContext":
        """Build a context only after checking the caller's signature over ``message``"""
        verify_signature(public_key, message, signature)
        return cls(signer_account_id=account_id, signer_public_key=public_key)
