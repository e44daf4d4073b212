from __future__ import annotations

from typing import Any, Dict

from issuer.storage import CredentialStore, CredentialStatus, utc_now_iso
from vccore.canonical import canonicalize
from vccore.encoding import b64url_decode, b64url_encode
from vccore.errors import InvalidEncoding
from vccore.keys import IdentityKey
from vccore.signing import ed25519_sign, ed25519_verify

STATUSLIST_VERSION = "v1"

def build_statuslist(issuer_key: IdentityKey, store: CredentialStore) -> Dict[str, Any]:
    """Issuer-signed list of revoked subject ids."""
    revoked = sorted(r.subject_id for r in store.list() if r.status == CredentialStatus.REVOKED)
    status = {
        "version": STATUSLIST_VERSION,
        "issuer_id": issuer_key.identifier,
        "revoked": revoked,
        "updated": utc_now_iso(),
    }
    sig = ed25519_sign(canonicalize(status), issuer_key.private_key)
    return {
        **status,
        "sig": b64url_encode(sig)
    }

def verify_statuslist(doc: Dict[str, Any], public_key: bytes) -> bool:
    if not isinstance(doc, dict) or not isinstance(doc.get("sig"), str):
        return False
    if doc.get("version") != STATUSLIST_VERSION or not isinstance(doc.get("revoked"), list):
        return False
    body = {k: v for k, v in doc.items() if k != "sig"}
    try:
        sig = b64url_decode(doc["sig"])
    except InvalidEncoding:
        return False
    return ed25519_verify(canonicalize(body), sig, public_key)
