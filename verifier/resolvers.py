"""
verifier.resolvers
------------------
Issuer key and credential status resolvers for the verification pipeline.

Key resolvers map an issuer identifier to a 32-byte Ed25519 public key or raise
UnresolvableIssuer. Status resolvers map a subject id to "active", "revoked"
or None when they have no answer.
"""

from __future__ import annotations

from typing import Callable, Optional

import requests

from issuer.statuslist import verify_statuslist
from vccore.errors import UnresolvableIssuer
from vccore.keys import public_key_from_identifier
from vccore.logger import get_logger
from vccore.signing import KEY_LEN

log = get_logger("studentvc.resolvers")

STATUS_TIMEOUT_S = 5

def resolve_did_key(identifier: str) -> bytes:
    """did:key is self-certifying: the public key is read out of the identifier."""
    try:
        public_key = public_key_from_identifier(identifier)
    except ValueError as e:
        raise UnresolvableIssuer(str(e)) from e
    if len(public_key) != KEY_LEN:
        raise UnresolvableIssuer("resolved key has the wrong length")
    return public_key

def pinned_key_resolver(public_keys: dict) -> Callable[[str], bytes]:
    """Resolver backed by a fixed identifier -> public key table."""
    def resolve(identifier: str) -> bytes:
        try:
            public_key = public_keys[identifier]
        except KeyError:
            raise UnresolvableIssuer(f"unknown issuer: {identifier}") from None
        if len(public_key) != KEY_LEN:
            raise UnresolvableIssuer(f"pinned key for {identifier} has the wrong length")
        return public_key
    return resolve

def store_status_resolver(store) -> Callable[[str], Optional[str]]:
    """Status straight from a CredentialStore; subjects it does not know are unknown."""
    def resolve(subject_id: str) -> Optional[str]:
        record = store.get(subject_id)
        if record is None:
            return None
        return record.status.value
    return resolve

def remote_status_resolver(issuer_url: str, issuer_id: str, timeout: float = STATUS_TIMEOUT_S) -> Callable[[str], Optional[str]]:
    """
    Status from the issuer's signed status list (GET <issuer_url>/statuslist).
    The list must be signed by issuer_id; transport or signature failures give None.
    """
    def resolve(subject_id: str) -> Optional[str]:
        try:
            r = requests.get(f"{issuer_url.rstrip('/')}/statuslist", timeout=timeout)
            r.raise_for_status()
            doc = r.json()
        except (requests.RequestException, ValueError) as e:
            log.warning(f"status list unavailable from {issuer_url}: {e}")
            return None

        if not isinstance(doc, dict) or doc.get("issuer_id") != issuer_id:
            log.warning(f"status list from {issuer_url} is not signed for {issuer_id}")
            return None
        try:
            public_key = resolve_did_key(issuer_id)
        except UnresolvableIssuer:
            return None
        if not verify_statuslist(doc, public_key):
            log.warning(f"status list signature invalid from {issuer_url}")
            return None
        return "revoked" if subject_id in doc["revoked"] else "active"
    return resolve
