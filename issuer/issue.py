from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional

from issuer.credential import (
    build_credential,
    from_iso,
    status_descriptor,
    student_claims,
    utc_now,
)
from issuer.identity import Issuer
from issuer.storage import CredentialStore, StoredRecord
from verifier.resolvers import store_status_resolver
from verifier.verify import VerificationResult, verify_token
from vccore import jwt
from vccore.config import STATUS_BASE_URL
from vccore.errors import StoreInconsistency
from vccore.keys import IdentityKey
from vccore.logger import get_logger
from vccore.signing import ed25519_sign

log = get_logger("studentvc.issuer")

DEFAULT_VALIDITY_DAYS = 365

@dataclass
class StudentData:
    student_id: str
    name: str
    title: str
    description: Optional[str] = None
    date_of_issue: Optional[str] = None
    expiry_date: Optional[str] = None    # ISO-8601, also the credential expirationDate
    directed_by: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "StudentData":
        return cls(
            student_id=data["studentId"],
            name=data["name"],
            title=data["title"],
            description=data.get("description"),
            date_of_issue=data.get("dateOfIssue"),
            expiry_date=data.get("expiryDate"),
            directed_by=data.get("directedBy"),
            location=data.get("location"),
        )

@dataclass
class IssuedCredential:
    credential: Dict[str, Any]
    jwt: str
    student_id: str
    record: StoredRecord

def build_payload(credential: Dict[str, Any], issued_at: datetime,
                  expires_at: Optional[datetime] = None) -> Dict[str, Any]:
    payload = {
        "vc": credential,
        "iss": credential["issuer"]["id"],
        "sub": credential["credentialSubject"]["id"],
        "jti": credential["id"],
        "nbf": int(issued_at.timestamp()),
    }
    if expires_at is not None:
        payload["exp"] = int(expires_at.timestamp())
    return payload

def sign_credential(
    credential: Dict[str, Any],
    issuer_key: IdentityKey,
    issued_at: datetime,
    expires_at: Optional[datetime] = None,
) -> str:
    """Sign a credential as a compact EdDSA JWT."""
    header = dict(jwt.HEADER)
    payload = build_payload(credential, issued_at, expires_at)
    signature = ed25519_sign(jwt.signing_input(header, payload), issuer_key.private_key)
    return jwt.encode(header, payload, signature)

def issue_student_credential(
    issuer: Issuer,
    store: CredentialStore,
    student: StudentData,
    now: Optional[datetime] = None,
    status_base_url: str = STATUS_BASE_URL,
) -> IssuedCredential:
    """
    Issue and persist a student card credential.
    Without an explicit expiry the credential is valid for DEFAULT_VALIDITY_DAYS.
    Re-issuing for the same student replaces the stored record.
    """
    now = now or utc_now()
    if student.expiry_date:
        expires_at = from_iso(student.expiry_date)
    else:
        expires_at = now + timedelta(days=DEFAULT_VALIDITY_DAYS)

    claims = student_claims(
        name=student.name,
        title=student.title,
        description=student.description,
        date_of_issue=student.date_of_issue,
        expiry_date=student.expiry_date,
        directed_by=student.directed_by or issuer.name,
        location=student.location or issuer.location or None,
    )
    credential = build_credential(
        issuer_identifier=issuer.did,
        issuer_name=issuer.name,
        subject_id=student.student_id,
        subject_claims=claims,
        issuance_time=now,
        expiration_time=expires_at,
        status=status_descriptor(status_base_url, student.student_id),
    )
    token = sign_credential(credential, issuer.key, now, expires_at)
    record = store.put(student.student_id, token, credential=credential)

    log.info(f"issued credential student={student.student_id} id={credential['id']} issuer={issuer.did}")
    return IssuedCredential(credential=credential, jwt=token, student_id=student.student_id, record=record)

def verify_student_credential(
    store: CredentialStore,
    student_id: str,
    token: Optional[str] = None,
    now: Optional[datetime] = None,
    trusted_issuers: Optional[Iterable[str]] = None,
    fail_closed: bool = False,
) -> VerificationResult:
    """
    Verify a student's credential, loading the token from the store when none is
    given. Status always comes from the store.
    """
    if token is None:
        record = store.get(student_id)
        if record is None:
            raise StoreInconsistency(f"Credential not found for student ID: {student_id}")
        token = record.token

    return verify_token(
        token,
        now=now,
        status_resolver=store_status_resolver(store),
        trusted_issuers=trusted_issuers,
        fail_closed=fail_closed,
    )

def revoke_student_credential(store: CredentialStore, student_id: str) -> bool:
    result = store.set_status(student_id, "revoked")
    if result:
        log.info(f"revoked credential for student={student_id}")
    else:
        log.warning(f"credential not found for student={student_id}")
    return result
