from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import base58
from Crypto.PublicKey import ECC
from Crypto.Random import get_random_bytes

from vccore.errors import InvalidKeyMaterial, KeyGenerationError
from vccore.hashing import sha256

DID_KEY_PREFIX = "did:key:"
MULTIBASE_BASE58BTC = "z"
ED25519_PUB_HEADER = bytes([0xed, 0x01])  # ed25519-pub multicodec

KEY_LEN = 32

def identifier_from_public_key(public_key: bytes) -> str:
    """did:key identifier: prefix || multibase(base58btc, multicodec || public key)."""
    if len(public_key) != KEY_LEN:
        raise InvalidKeyMaterial(f"Ed25519 public key must be {KEY_LEN} bytes")
    encoded = base58.b58encode(ED25519_PUB_HEADER + public_key).decode("ascii")
    return DID_KEY_PREFIX + MULTIBASE_BASE58BTC + encoded

def public_key_from_identifier(identifier: str) -> bytes:
    """
    Inverse of identifier_from_public_key.
    Raises ValueError for anything that is not an Ed25519 did:key.
    """
    if not isinstance(identifier, str) or not identifier.startswith(DID_KEY_PREFIX + MULTIBASE_BASE58BTC):
        raise ValueError(f"not a base58btc did:key identifier: {identifier!r}")

    # did:key:z6Mk...#z6Mk... key references resolve to the same key
    method_specific = identifier[len(DID_KEY_PREFIX) + 1:].split("#", 1)[0]
    decoded = base58.b58decode(method_specific)

    if decoded[:2] != ED25519_PUB_HEADER:
        raise ValueError("did:key does not carry an ed25519-pub multicodec")
    public_key = decoded[2:]
    if len(public_key) != KEY_LEN:
        raise ValueError("did:key public key has the wrong length")
    return public_key

@dataclass(frozen=True)
class IdentityKey:
    private_key: bytes = field(repr=False)
    public_key: bytes

    @property
    def identifier(self) -> str:
        return identifier_from_public_key(self.public_key)

    @classmethod
    def from_private_key(cls, private_key: bytes) -> "IdentityKey":
        if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != KEY_LEN:
            raise InvalidKeyMaterial(f"Ed25519 private key must be {KEY_LEN} bytes")
        sk = ECC.construct(curve="Ed25519", seed=bytes(private_key))
        pk = sk.public_key().export_key(format="raw")
        return cls(private_key=bytes(private_key), public_key=pk)

    def ecc_key(self) -> ECC.EccKey:
        return ECC.construct(curve="Ed25519", seed=self.private_key)

def generate(seed: Optional[bytes] = None) -> IdentityKey:
    """
    Deterministic when a seed is given: the private key is SHA-256(seed), so the
    same seed always yields the same identifier.
    Without a seed the private key is drawn from the OS CSPRNG.
    """
    if seed is not None:
        if isinstance(seed, str):
            seed = seed.encode("utf-8")
        return IdentityKey.from_private_key(sha256(seed))

    try:
        private_key = get_random_bytes(KEY_LEN)
    except (OSError, NotImplementedError) as e:
        raise KeyGenerationError("entropy source unavailable") from e
    return IdentityKey.from_private_key(private_key)
