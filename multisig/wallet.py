"""
Multi-signature wallet: owners jointly approve and execute transactions
"""

import hashlib
import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .errors import (
    AlreadyConfirmed,
    AlreadyExecuted,
    ConfigError,
    ExecutionFailed,
    InsufficientConfirmations,
    InvalidTarget,
    NotAuthorized,
    NotConfirmed,
    NotFound,
)
from .events import Confirm, Deposit, EventLog, Execute, Listener, Revoke, Submit, WalletEvent
from .identity import is_null_identity
from .vault import Vault

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, str, None]


@dataclass
class Transaction:
    """A proposed transfer tracked through confirmation to at most one execution"""
    to: str
    value: int
    data: bytes
    executed: bool = False
    num_confirmations: int = 0

    def to_dict(self) -> dict:
        return {
            'to': self.to,
            'value': self.value,
            'data': "0x" + self.data.hex(),
            'executed': self.executed,
            'num_confirmations': self.num_confirmations,
        }


def _coerce_data(data: Payload) -> bytes:
    """Accept raw bytes or a hex string ("0x" prefix optional)"""
    if data is None:
        return b""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        raw = data[2:] if data.lower().startswith("0x") else data
        return bytes.fromhex(raw)
    raise ValueError(f"Unsupported payload type {type(data).__name__}")


def _check_amount(amount: int, name: str, allow_zero: bool) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValueError(f"{name} must be an integer, got {type(amount).__name__}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValueError(f"{name} must be {'non-negative' if allow_zero else 'positive'}, got {amount}")


class MultiSigWallet:
    """
    Approval ledger for a fixed set of owners.

    Transactions live in an append-only list; the list position is the
    transaction index. Every mutating call runs under one reentrant lock, and
    ``execute`` marks a transaction executed before the vault transfer runs,
    so a recipient calling back in sees it as already executed.
    """

    def __init__(self, owners: Sequence[str], threshold: int, vault: Optional[Vault] = None):
        owners = list(owners) if owners is not None else []
        if not owners:
            raise ConfigError("empty owner set")

        if (not isinstance(threshold, int) or isinstance(threshold, bool)
                or threshold < 1 or threshold > len(owners)):
            raise ConfigError("invalid threshold")

        seen = set()
        for owner in owners:
            if is_null_identity(owner):
                raise ConfigError("null owner")
            if owner in seen:
                raise ConfigError("duplicate owner")
            seen.add(owner)

        self._owners: List[str] = owners
        self._owner_set = frozenset(seen)
        self._threshold = threshold
        self._transactions: List[Transaction] = []
        self._confirmations: Dict[Tuple[int, str], bool] = {}
        self._lock = threading.RLock()
        self._events = EventLog()
        self.vault = vault if vault is not None else Vault()

        logger.info("Wallet created: %d-of-%d", threshold, len(owners))

    # ------------------------------------------------------------------
    # Guards

    def _require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            logger.warning("Rejected call from non-owner %s", str(caller)[:16])
            raise NotAuthorized(caller)

    def _require_transaction(self, index: int) -> Transaction:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._transactions):
            raise NotFound(index)
        return self._transactions[index]

    def _require_pending(self, index: int) -> Transaction:
        tx = self._require_transaction(index)
        if tx.executed:
            raise AlreadyExecuted(index)
        return tx

    def _set_confirmation(self, index: int, owner: str, confirmed: bool) -> None:
        """Only place the confirmation table and counter change"""
        tx = self._transactions[index]
        self._confirmations[(index, owner)] = confirmed
        tx.num_confirmations += 1 if confirmed else -1

    # ------------------------------------------------------------------
    # Mutating operations

    def deposit(self, sender: str, amount: int) -> int:
        """Accept incoming value from anyone; returns the resulting balance"""
        _check_amount(amount, "amount", allow_zero=True)
        with self._lock:
            balance = self.vault.credit(amount)
            self._events.emit(Deposit(sender, amount, balance))
        logger.info("Deposit of %d from %s, balance %d", amount, str(sender)[:16], balance)
        return balance

    def submit(self, caller: str, to: str, value: int, data: Payload = b"") -> int:
        """Propose a transfer; returns its index"""
        with self._lock:
            self._require_owner(caller)
            if is_null_identity(to):
                raise InvalidTarget(to)
            _check_amount(value, "value", allow_zero=True)
            payload = _coerce_data(data)

            index = len(self._transactions)
            self._transactions.append(Transaction(to=to, value=value, data=payload))
            self._events.emit(Submit(caller, index, to, value, payload))

        logger.info("Transaction %d submitted: %d to %s", index, value, str(to)[:16])
        return index

    def confirm(self, caller: str, index: int) -> None:
        with self._lock:
            self._require_owner(caller)
            self._require_pending(index)
            if self._confirmations.get((index, caller), False):
                raise AlreadyConfirmed(index, caller)

            self._set_confirmation(index, caller, True)
            self._events.emit(Confirm(caller, index))
            count = self._transactions[index].num_confirmations

        logger.info("Transaction %d confirmed (%d/%d)", index, count, self._threshold)

    def revoke(self, caller: str, index: int) -> None:
        with self._lock:
            self._require_owner(caller)
            self._require_pending(index)
            if not self._confirmations.get((index, caller), False):
                raise NotConfirmed(index, caller)

            self._set_confirmation(index, caller, False)
            self._events.emit(Revoke(caller, index))
            count = self._transactions[index].num_confirmations

        logger.info("Confirmation on transaction %d revoked (%d/%d)", index, count, self._threshold)

    def execute(self, caller: str, index: int) -> None:
        """
        Run a sufficiently confirmed transaction exactly once.

        The executed flag is set before the vault transfer and is not cleared
        if the transfer fails; a failed transaction cannot be executed again.
        """
        with self._lock:
            self._require_owner(caller)
            tx = self._require_pending(index)
            if tx.num_confirmations < self._threshold:
                raise InsufficientConfirmations(index, tx.num_confirmations, self._threshold)

            tx.executed = True

            try:
                ok = self.vault.transfer(tx.to, tx.value, tx.data)
            except Exception as exc:
                logger.warning("Transaction %d transfer raised: %s", index, exc)
                raise ExecutionFailed(index, str(exc)) from exc
            if not ok:
                logger.warning("Transaction %d transfer failed", index)
                raise ExecutionFailed(index)

            self._events.emit(Execute(caller, index))

        logger.info("Transaction %d executed", index)

    # ------------------------------------------------------------------
    # Queries

    def get_owners(self) -> List[str]:
        return list(self._owners)

    def is_owner(self, identity: str) -> bool:
        return isinstance(identity, str) and identity in self._owner_set

    @property
    def threshold(self) -> int:
        return self._threshold

    num_confirmations_required = threshold

    def get_transaction_count(self) -> int:
        with self._lock:
            return len(self._transactions)

    def get_transaction(self, index: int) -> Transaction:
        """Snapshot of a transaction; mutating it does not affect the wallet"""
        with self._lock:
            return replace(self._require_transaction(index))

    def is_confirmed(self, index: int, owner: str) -> bool:
        with self._lock:
            self._require_transaction(index)
            return self._confirmations.get((index, owner), False)

    def get_confirmations(self, index: int) -> List[str]:
        """Owners with a standing confirmation, in owner order"""
        with self._lock:
            self._require_transaction(index)
            return [o for o in self._owners if self._confirmations.get((index, o), False)]

    @property
    def wallet_id(self) -> str:
        """Deterministic id from the owner set and threshold"""
        hasher = hashlib.sha256()
        hasher.update(b"MULTISIG_WALLET_V1")
        for owner in self._owners:
            hasher.update(owner.encode())
            hasher.update(b"\x00")
        hasher.update(self._threshold.to_bytes(4, 'little'))
        return hasher.hexdigest()

    @property
    def nonce(self) -> int:
        """Number of notifications emitted so far; grows with every mutation"""
        with self._lock:
            return len(self._events)

    def get_balance(self) -> int:
        with self._lock:
            return self.vault.total_balance

    # ------------------------------------------------------------------
    # Notifications

    def subscribe(self, listener: Listener) -> None:
        self._events.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._events.unsubscribe(listener)

    def events(self, event_type=None) -> List[WalletEvent]:
        with self._lock:
            return self._events.events(event_type)
