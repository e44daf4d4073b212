from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence

CONTEXT = [
    "https://www.w3.org/2018/credentials/v1",
    "https://www.w3.org/2018/credentials/examples/v1",
]
BASE_TYPE = "VerifiableCredential"
STUDENT_CREDENTIAL_TYPE = "UniversityCardCredential"
STATUS_LIST_TYPE = "StudentCredentialStatusList2025"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:#%+-]*$")

def is_valid_identifier(value: Any) -> bool:
    """Non-empty, no whitespace, no path separators, does not start with '.'."""
    return isinstance(value, str) and bool(_IDENTIFIER_RE.match(value))

def to_iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

def from_iso(value: str) -> datetime:
    # fromisoformat only learned "Z" in 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def credential_id(subject_id: str, issuance_time: datetime) -> str:
    return f"urn:credential:{subject_id}-{int(issuance_time.timestamp() * 1000)}"

def status_descriptor(status_base_url: str, subject_id: str) -> Dict[str, str]:
    return {
        "id": f"{status_base_url.rstrip('/')}/{subject_id}",
        "type": STATUS_LIST_TYPE,
    }

def build_credential(
    issuer_identifier: str,
    issuer_name: str,
    subject_id: str,
    subject_claims: Mapping[str, Any],
    issuance_time: datetime,
    expiration_time: Optional[datetime] = None,
    credential_types: Sequence[str] = (STUDENT_CREDENTIAL_TYPE,),
    status: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Assemble the W3C credential claim-set. Pure; does not sign.

    expiration_time <= issuance_time is accepted as given: sanity of the
    validity window is the caller's job.
    """
    if not is_valid_identifier(issuer_identifier):
        raise ValueError(f"invalid issuer identifier: {issuer_identifier!r}")
    if not is_valid_identifier(subject_id):
        raise ValueError(f"invalid subject identifier: {subject_id!r}")

    types = [BASE_TYPE] + [t for t in credential_types if t != BASE_TYPE]

    # subject id always first, claims may not override it
    credential_subject: Dict[str, Any] = {"id": subject_id}
    for name, value in subject_claims.items():
        if name == "id":
            continue
        credential_subject[name] = value

    credential: Dict[str, Any] = {
        "@context": list(CONTEXT),
        "type": types,
        "id": credential_id(subject_id, issuance_time),
        "issuer": {"id": issuer_identifier, "name": issuer_name},
        "issuanceDate": to_iso(issuance_time),
    }
    if expiration_time is not None:
        credential["expirationDate"] = to_iso(expiration_time)
    credential["credentialSubject"] = credential_subject
    if status is not None:
        credential["credentialStatus"] = dict(status)
    return credential

def student_claims(
    name: str,
    title: str,
    description: Optional[str] = None,
    date_of_issue: Optional[str] = None,
    expiry_date: Optional[str] = None,
    directed_by: Optional[str] = None,
    location: Optional[str] = None,
) -> Dict[str, Any]:
    """Student card attributes; unset optional attributes are left out."""
    claims = {
        "name": name,
        "title": title,
        "description": description,
        "dateOfIssue": date_of_issue,
        "expiryDate": expiry_date,
        "directedBy": directed_by,
        "location": location,
    }
    return {k: v for k, v in claims.items() if v is not None}
