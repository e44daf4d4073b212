from Crypto.PublicKey import ECC
from Crypto.Signature import eddsa

from vccore.errors import InvalidKeyMaterial

SIGNATURE_LEN = 64
KEY_LEN = 32

def ed25519_sign(message: bytes, private_key: bytes) -> bytes:
    """
    Standard Ed25519 over the raw message bytes (RFC8032).
    Deterministic: the same message and key always give the same signature.
    DO NOT pre-hash here; JWT verifiers expect a signature over the signing input itself.
    """
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != KEY_LEN:
        raise InvalidKeyMaterial(f"Ed25519 private key must be {KEY_LEN} bytes")
    sk = ECC.construct(curve="Ed25519", seed=bytes(private_key))
    signer = eddsa.new(sk, mode="rfc8032")
    return signer.sign(message)

def ed25519_verify(message: bytes, sig: bytes, public_key: bytes) -> bool:
    """
    Verify standard Ed25519 signature over raw message bytes.
    Never raises: wrong lengths and invalid curve points fail closed.
    """
    if not isinstance(sig, (bytes, bytearray)) or len(sig) != SIGNATURE_LEN:
        return False
    if not isinstance(public_key, (bytes, bytearray)) or len(public_key) != KEY_LEN:
        return False
    try:
        pk = eddsa.import_public_key(bytes(public_key))
        verifier = eddsa.new(pk, mode="rfc8032")
        verifier.verify(message, bytes(sig))
        return True
    except (ValueError, TypeError):
        return False
