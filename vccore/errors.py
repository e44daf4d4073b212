"""
vccore.errors
-------------
Error taxonomy shared by issuance, storage and verification.

Decode-time errors are always recoverable: the verification pipeline turns them
into a rejected result instead of letting them escape.
"""


class CredentialError(Exception):
    pass


class KeyGenerationError(CredentialError):
    """Entropy source or seed source unusable. Fatal to the issuing operation."""


class InvalidKeyMaterial(CredentialError, ValueError):
    pass


class DecodeError(CredentialError):
    pass


class MalformedStructure(DecodeError):
    pass


class InvalidEncoding(DecodeError):
    pass


class InvalidSignatureLength(DecodeError):
    pass


class InvalidPayloadSchema(DecodeError):
    pass


class UnresolvableIssuer(CredentialError):
    pass


class StoreInconsistency(CredentialError):
    """An expected record is missing from the credential store."""


class StorageError(CredentialError):
    """Unrecoverable storage I/O or a corrupt record on disk."""
