"""
Error taxonomy for the multi-signature wallet
"""

from typing import Optional


class MultiSigError(Exception):
    """Base class for every rejection raised by the wallet"""

    def __init__(self, message: str = "", index: Optional[int] = None, caller: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.caller = caller


class ConfigError(MultiSigError, ValueError):
    """Wallet could not be constructed from the given owners/threshold"""


class NotAuthorized(MultiSigError):
    """Caller is not an owner"""

    def __init__(self, caller: Optional[str] = None):
        super().__init__("Not an owner", caller=caller)


class NotFound(MultiSigError, LookupError):
    """Transaction index does not exist"""

    def __init__(self, index: int):
        super().__init__(f"Transaction {index} does not exist", index=index)


class AlreadyExecuted(MultiSigError):
    def __init__(self, index: int):
        super().__init__("Transaction already executed", index=index)


class AlreadyConfirmed(MultiSigError):
    def __init__(self, index: int, caller: str):
        super().__init__("Transaction already confirmed", index=index, caller=caller)


class NotConfirmed(MultiSigError):
    """Revoke attempted without a standing confirmation"""

    def __init__(self, index: int, caller: str):
        super().__init__("Transaction not confirmed by caller", index=index, caller=caller)


class InvalidTarget(MultiSigError, ValueError):
    def __init__(self, to=None):
        super().__init__("Invalid target address")
        self.to = to


class InsufficientConfirmations(MultiSigError):
    def __init__(self, index: int, confirmations: int, required: int):
        super().__init__(
            f"Not enough confirmations: have {confirmations}, need {required}",
            index=index,
        )
        self.confirmations = confirmations
        self.required = required


class ExecutionFailed(MultiSigError):
    """The transfer effect reported failure; the transaction stays executed"""

    def __init__(self, index: int, reason: str = "transfer failed"):
        super().__init__(f"Transaction failed: {reason}", index=index)
        self.reason = reason
