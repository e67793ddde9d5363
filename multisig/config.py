import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .vault import Vault


@dataclass
class WalletConfig:
    """Owners and confirmation threshold for a wallet deployment"""

    owners: List[str] = field(default_factory=list)
    threshold: int = 1

    @classmethod
    def majority(cls, owners: List[str]) -> 'WalletConfig':
        """Require more than half of the owners"""
        return cls(owners=list(owners), threshold=len(owners) // 2 + 1)

    @classmethod
    def unanimous(cls, owners: List[str]) -> 'WalletConfig':
        """Require every owner"""
        return cls(owners=list(owners), threshold=len(owners))

    @classmethod
    def from_dict(cls, data: dict) -> 'WalletConfig':
        owners = data.get('owners', [])
        if not isinstance(owners, (list, tuple)):
            raise ValueError(f"owners must be a list, got {type(owners).__name__}")
        return cls(owners=list(owners), threshold=data.get('threshold', 1))

    @classmethod
    def from_json_file(cls, path: str) -> 'WalletConfig':
        with open(path, 'r', encoding='utf-8') as fh:
            return cls.from_dict(json.load(fh))

    @classmethod
    def from_env(cls, prefix: str = "MULTISIG_", environ: Optional[dict] = None) -> 'WalletConfig':
        """Read ``<prefix>OWNERS`` (comma separated) and ``<prefix>THRESHOLD``"""
        env = os.environ if environ is None else environ
        raw_owners = env.get(f"{prefix}OWNERS", "")
        owners = [o.strip() for o in raw_owners.split(",") if o.strip()]
        raw_threshold = env.get(f"{prefix}THRESHOLD")
        if raw_threshold is None:
            return cls.majority(owners)
        try:
            threshold = int(raw_threshold)
        except ValueError:
            raise ValueError(f"{prefix}THRESHOLD must be an integer, got {raw_threshold!r}")
        return cls(owners=owners, threshold=threshold)

    def to_dict(self) -> dict:
        return {'owners': list(self.owners), 'threshold': self.threshold}

    def build_wallet(self, vault: Optional[Vault] = None) -> 'MultiSigWallet':
        """Construct the wallet; the wallet constructor validates the config"""
        from .wallet import MultiSigWallet
        return MultiSigWallet(self.owners, self.threshold, vault=vault)
