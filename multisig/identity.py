"""
Owner identities: secp256k1 key pairs and request signatures
"""

import hashlib
import logging
from typing import Optional, Tuple

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError

logger = logging.getLogger(__name__)

# Zero address analogue; any all-zero identity is treated as null
NULL_IDENTITY = "0" * 66


def is_null_identity(identity: Optional[str]) -> bool:
    """True for None, non-string values, empty strings and all-zero hex identities"""
    if not isinstance(identity, str):
        return True
    body = identity[2:] if identity.lower().startswith("0x") else identity
    return body.strip("0") == ""


class OwnerKey:
    """Key pair held by a wallet owner"""

    def __init__(self, private_key: bytes = None):
        if private_key:
            self.private_key = SigningKey.from_string(private_key, curve=SECP256k1)
        else:
            self.private_key = SigningKey.generate(curve=SECP256k1)

        self.public_key = self.private_key.get_verifying_key()

    @classmethod
    def from_hex(cls, private_hex: str) -> 'OwnerKey':
        return cls(bytes.fromhex(private_hex))

    def get_public_key_hex(self) -> str:
        """Compressed public key in hex; this is the owner's identity"""
        return self.public_key.to_string("compressed").hex()

    @property
    def identity(self) -> str:
        return self.get_public_key_hex()

    def sign_message(self, message: bytes) -> str:
        """Sign message and return signature in hex"""
        signature = self.private_key.sign(message, hashfunc=hashlib.sha256)
        return signature.hex()

    @staticmethod
    def verify_signature(message: bytes, signature_hex: str, pubkey_hex: str) -> bool:
        """Verify signature against message and public key (compressed or uncompressed)"""
        try:
            pubkey_bytes = bytes.fromhex(pubkey_hex)
            vk = VerifyingKey.from_string(pubkey_bytes, curve=SECP256k1)
            signature = bytes.fromhex(signature_hex)
            return vk.verify(signature, message, hashfunc=hashlib.sha256)
        except (BadSignatureError, MalformedPointError, ValueError, TypeError) as exc:
            logger.debug("Signature rejected for %s: %s", str(pubkey_hex)[:16], exc)
            return False

    @staticmethod
    def generate_key_pair() -> Tuple[str, str]:
        """Generate new key pair and return (private_key_hex, public_key_hex)"""
        key = OwnerKey()
        private_hex = key.private_key.to_string().hex()
        public_hex = key.get_public_key_hex()
        return private_hex, public_hex
