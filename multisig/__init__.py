"""
Multi-Signature Wallet - shared custody with quorum approval
Owners submit, confirm, revoke and execute transactions against a shared vault
"""

from .wallet import MultiSigWallet, Transaction
from .vault import Vault, Payout
from .config import WalletConfig
from .identity import OwnerKey, NULL_IDENTITY, is_null_identity
from .events import WalletEvent, Deposit, Submit, Confirm, Revoke, Execute, EventLog
from .errors import (
    MultiSigError,
    ConfigError,
    NotAuthorized,
    NotFound,
    AlreadyExecuted,
    AlreadyConfirmed,
    NotConfirmed,
    InvalidTarget,
    InsufficientConfirmations,
    ExecutionFailed,
)

__version__ = "0.1.0"
__all__ = [
    "MultiSigWallet",
    "Transaction",
    "Vault",
    "Payout",
    "WalletConfig",
    "OwnerKey",
    "NULL_IDENTITY",
    "is_null_identity",
    "WalletEvent",
    "Deposit",
    "Submit",
    "Confirm",
    "Revoke",
    "Execute",
    "EventLog",
    "MultiSigError",
    "ConfigError",
    "NotAuthorized",
    "NotFound",
    "AlreadyExecuted",
    "AlreadyConfirmed",
    "NotConfirmed",
    "InvalidTarget",
    "InsufficientConfirmations",
    "ExecutionFailed",
]
