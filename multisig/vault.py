import logging
import threading
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Recipient hook: called with (value, data) while the transfer is in flight.
# Returning False rejects the transfer.
RecipientHook = Callable[[int, bytes], bool]


@dataclass
class Payout:
    """A transfer that left the vault"""
    to: str
    value: int
    data: bytes

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload['data'] = "0x" + self.data.hex()
        return payload


class Vault:
    """Balance pool behind a wallet; performs the transfer effect"""

    def __init__(self, total_balance: int = 0):
        self.total_balance = total_balance
        self._received: Dict[str, int] = {}
        self._hooks: Dict[str, RecipientHook] = {}
        self._payout_history: List[Payout] = []
        # Wallets sharing a vault each hold their own lock; this one guards the balance
        self._lock = threading.RLock()

    def credit(self, amount: int) -> int:
        """Add incoming value and return the resulting balance"""
        with self._lock:
            self.total_balance += amount
            return self.total_balance

    def register_recipient(self, identity: str, hook: RecipientHook) -> None:
        """Install code that runs when ``identity`` receives a transfer"""
        self._hooks[identity] = hook

    def transfer(self, to: str, value: int, data: bytes) -> bool:
        """Move value out of the vault; all-or-nothing"""
        with self._lock:
            return self._transfer(to, value, data)

    def _transfer(self, to: str, value: int, data: bytes) -> bool:
        if value > self.total_balance:
            logger.warning("Insufficient vault balance: need %d, have %d", value, self.total_balance)
            return False

        self.total_balance -= value
        self._received[to] = self._received.get(to, 0) + value

        hook = self._hooks.get(to)
        if hook is not None:
            accepted = False
            try:
                accepted = bool(hook(value, data))
            finally:
                if not accepted:
                    # Recipient rejected or raised; restore balances
                    self.total_balance += value
                    self._received[to] -= value
                    logger.warning("Recipient %s rejected transfer of %d", str(to)[:16], value)
            if not accepted:
                return False

        self._payout_history.append(Payout(to, value, bytes(data)))
        return True

    def balance_of(self, identity: str) -> int:
        """Total value transferred to identity"""
        return self._received.get(identity, 0)

    def get_payout_history(self) -> List[Payout]:
        return self._payout_history.copy()

    def to_dict(self) -> dict:
        """Serialize vault to dictionary"""
        return {
            'total_balance': self.total_balance,
            'received': dict(self._received),
            'payouts': [p.to_dict() for p in self._payout_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Vault':
        """Deserialize vault from dictionary (hooks are not persisted)"""
        vault = cls(data['total_balance'])
        vault._received = dict(data.get('received', {}))
        for p in data.get('payouts', []):
            raw = p['data'][2:] if p['data'].startswith("0x") else p['data']
            vault._payout_history.append(Payout(p['to'], p['value'], bytes.fromhex(raw)))
        return vault

    def payout_count(self, to: Optional[str] = None) -> int:
        if to is None:
            return len(self._payout_history)
        return sum(1 for p in self._payout_history if p.to == to)
