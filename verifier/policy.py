from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from issuer.credential import from_iso, to_iso, utc_now
from verifier.verify import VerificationResult

NOT_VERIFIED = "Credential verification failed"

@dataclass
class PolicyCheck:
    valid: Optional[bool]
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)

@dataclass
class CredentialValidation:
    signature_valid: bool
    issuer_trusted: Optional[bool] = None
    subject_valid: Optional[bool] = None
    expired: Optional[bool] = None
    status_active: Optional[bool] = None
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.signature_valid and not self.errors

def validate_issuer(result: VerificationResult, trusted_issuers: Iterable[str]) -> PolicyCheck:
    if not result.verified:
        return PolicyCheck(valid=False, reason=NOT_VERIFIED)

    issuer_did = (result.issuer or {}).get("id")
    is_trusted = issuer_did in set(trusted_issuers)
    return PolicyCheck(
        valid=is_trusted,
        reason="Issuer is trusted" if is_trusted else "Issuer not in trusted list",
        details={"issuer": issuer_did},
    )

def validate_subject(result: VerificationResult, expected_subject: str) -> PolicyCheck:
    if not result.verified:
        return PolicyCheck(valid=False, reason=NOT_VERIFIED)

    actual = result.credential_subject.get("id")
    matches = actual == expected_subject
    return PolicyCheck(
        valid=matches,
        reason="Subject matches" if matches else "Subject DID mismatch",
        details={"expectedSubject": expected_subject, "actualSubject": actual},
    )

def check_expiration(result: VerificationResult, now: Optional[datetime] = None) -> PolicyCheck:
    """valid is False once the credential is past its expirationDate."""
    if not result.verified:
        return PolicyCheck(valid=None, reason=NOT_VERIFIED)
    if not result.expiration_date:
        return PolicyCheck(valid=True, reason="No expiration date set", details={"expired": False})

    now = now or utc_now()
    try:
        exp = from_iso(result.expiration_date)
    except ValueError:
        return PolicyCheck(
            valid=False,
            reason=f"Unreadable expiration date {result.expiration_date!r}",
            details={"expired": True},
        )
    expired = exp < now
    return PolicyCheck(
        valid=not expired,
        reason=f"Expired on {to_iso(exp)}" if expired else "Still valid",
        details={"expired": expired, "expirationDate": to_iso(exp)},
    )

def validate_credential(
    result: VerificationResult,
    trusted_issuers: Iterable[str] = (),
    expected_subject: Optional[str] = None,
    check_expiry: bool = True,
    require_active: bool = True,
    now: Optional[datetime] = None,
) -> CredentialValidation:
    """
    Relying-party policy on top of a pipeline result. Every failed check adds
    a human-readable entry to `errors`.
    """
    out = CredentialValidation(signature_valid=result.verified)
    if not result.verified:
        out.errors.append(f"Signature verification failed ({result.reason.value if result.reason else 'unknown'})")
        return out

    trusted_issuers = list(trusted_issuers)
    if trusted_issuers:
        check = validate_issuer(result, trusted_issuers)
        out.issuer_trusted = check.valid
        if not check.valid:
            out.errors.append(check.reason)

    if expected_subject:
        check = validate_subject(result, expected_subject)
        out.subject_valid = check.valid
        if not check.valid:
            out.errors.append(check.reason)

    if check_expiry:
        check = check_expiration(result, now)
        out.expired = check.details.get("expired")
        if not check.valid:
            out.errors.append(check.reason)

    out.status_active = result.status_active
    if require_active and not result.status_active:
        out.errors.append(f"Credential status is {result.status}")

    return out
