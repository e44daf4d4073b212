"""
verifier.verify
---------------
Verification pipeline for credential tokens.

    decode -> resolve issuer key -> signature -> expiration -> status -> trust

`verified` reflects cryptographic validity only. Expiration, revocation and
trust are reported as separate fields so relying parties can apply their own
policy (e.g. accept expired credentials for audit, reject them for access).
Nothing in here raises for a bad token.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from issuer.credential import from_iso, utc_now
from verifier.resolvers import resolve_did_key
from vccore import jwt
from vccore.errors import DecodeError, UnresolvableIssuer
from vccore.logger import get_logger
from vccore.signing import ed25519_verify

log = get_logger("studentvc.verifier")

KeyResolver = Callable[[str], bytes]
StatusResolver = Callable[[str], Optional[str]]

class Reason(str, Enum):
    MALFORMED = "MALFORMED"
    UNRESOLVABLE_ISSUER = "UNRESOLVABLE_ISSUER"
    BAD_SIGNATURE = "BAD_SIGNATURE"

@dataclass
class VerificationResult:
    verified: bool
    reason: Optional[Reason] = None
    detail: str = ""
    expired: bool = False
    status: str = "unknown"
    status_active: bool = False
    trusted: Optional[bool] = None
    issuer: Optional[Dict[str, Any]] = None
    subject_id: Optional[str] = None
    credential_subject: Dict[str, Any] = field(default_factory=dict)
    credential: Dict[str, Any] = field(default_factory=dict)
    issuance_date: Optional[str] = None
    expiration_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reason"] = self.reason.value if self.reason else None
        return data

def _rejected(reason: Reason, detail: str) -> VerificationResult:
    log.info(f"credential rejected reason={reason.value} detail={detail}")
    return VerificationResult(verified=False, reason=reason, detail=detail)

def _is_expired(payload: Dict[str, Any], vc: Dict[str, Any], now: datetime) -> bool:
    if "exp" in payload:
        return payload["exp"] < now.timestamp()
    expiration = vc.get("expirationDate")
    if not expiration:
        return False
    try:
        return from_iso(expiration) < now
    except (TypeError, ValueError):
        # unreadable expiry on a genuine token: treat as expired
        return True

def _resolve_status(status_resolver: Optional[StatusResolver], subject_id: str) -> str:
    if status_resolver is None:
        return "unknown"
    try:
        status = status_resolver(subject_id)
    except Exception as e:
        log.warning(f"status resolver failed subject={subject_id}: {e}")
        return "unknown"
    if status in ("active", "revoked"):
        return status
    return "unknown"

def verify_token(
    token: str,
    now: Optional[datetime] = None,
    key_resolver: KeyResolver = resolve_did_key,
    status_resolver: Optional[StatusResolver] = None,
    trusted_issuers: Optional[Iterable[str]] = None,
    fail_closed: bool = False,
) -> VerificationResult:
    """
    Verify one token. `now` defaults to the current UTC time.

    Unknown status (no resolver, or the resolver has no answer) counts as
    active unless fail_closed is set.
    """
    if now is None:
        now = utc_now()

    try:
        decoded = jwt.decode(token)
    except DecodeError as e:
        return _rejected(Reason.MALFORMED, f"{type(e).__name__}: {e}")

    payload = decoded.payload
    issuer_id = payload["iss"]

    try:
        public_key = key_resolver(issuer_id)
    except (UnresolvableIssuer, ValueError) as e:
        return _rejected(Reason.UNRESOLVABLE_ISSUER, f"{type(e).__name__}: {e}")

    if not ed25519_verify(decoded.signing_input, decoded.signature, public_key):
        return _rejected(Reason.BAD_SIGNATURE, "signature does not match issuer key")

    vc = payload["vc"]
    subject_id = payload["sub"]

    status = _resolve_status(status_resolver, subject_id)
    if status == "unknown":
        status_active = not fail_closed
    else:
        status_active = status == "active"

    trusted = None
    if trusted_issuers is not None:
        trusted = issuer_id in set(trusted_issuers)

    result = VerificationResult(
        verified=True,
        expired=_is_expired(payload, vc, now),
        status=status,
        status_active=status_active,
        trusted=trusted,
        issuer=vc.get("issuer"),
        subject_id=subject_id,
        credential_subject=vc.get("credentialSubject", {}),
        credential=vc,
        issuance_date=vc.get("issuanceDate"),
        expiration_date=vc.get("expirationDate"),
    )
    log.info(
        f"credential verified subject={subject_id} expired={result.expired} "
        f"status={status} trusted={trusted}"
    )
    return result
