"""
vccore.jwt
----------
Compact JWS codec for credential tokens:

    base64url(header_json) "." base64url(payload_json) "." base64url(signature)

Header and payload are serialised with canonicalize(), so a token is bit-exact
reproducible from its (header, payload, signature). No "=" padding anywhere.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict

from vccore.canonical import canonicalize
from vccore.encoding import b64url_decode, b64url_encode
from vccore.errors import (
    InvalidEncoding,
    InvalidPayloadSchema,
    InvalidSignatureLength,
    MalformedStructure,
)
from vccore.signing import SIGNATURE_LEN

ALG = "EdDSA"
TYP = "JWT"
HEADER = {"alg": ALG, "typ": TYP}

REQUIRED_CLAIMS = ("vc", "iss", "sub")

@dataclass(frozen=True)
class DecodedToken:
    header: Dict[str, Any]
    payload: Dict[str, Any]
    signature: bytes
    signing_input: bytes

def signing_input(header: Dict[str, Any], payload: Dict[str, Any]) -> bytes:
    return (b64url_encode(canonicalize(header)) + "." + b64url_encode(canonicalize(payload))).encode("ascii")

def encode(header: Dict[str, Any], payload: Dict[str, Any], signature: bytes) -> str:
    return signing_input(header, payload).decode("ascii") + "." + b64url_encode(signature)

def _parse_json_segment(segment: str, what: str) -> Dict[str, Any]:
    raw = b64url_decode(segment)
    try:
        obj = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidEncoding(f"{what} is not UTF-8 JSON") from e
    if not isinstance(obj, dict):
        raise InvalidPayloadSchema(f"{what} must be a JSON object")
    return obj

def validate_header(header: Dict[str, Any]) -> None:
    if header.get("alg") != ALG:
        raise InvalidPayloadSchema(f"unsupported alg: {header.get('alg')!r}")
    if header.get("typ", TYP) != TYP:
        raise InvalidPayloadSchema(f"unsupported typ: {header.get('typ')!r}")

def validate_payload(payload: Dict[str, Any]) -> None:
    missing = [c for c in REQUIRED_CLAIMS if c not in payload]
    if missing:
        raise InvalidPayloadSchema(f"payload missing required claims: {missing}")

    vc = payload["vc"]
    if not isinstance(vc, dict):
        raise InvalidPayloadSchema("vc must be an object")
    if not isinstance(payload["iss"], str) or not payload["iss"]:
        raise InvalidPayloadSchema("iss must be a non-empty string")
    if not isinstance(payload["sub"], str) or not payload["sub"]:
        raise InvalidPayloadSchema("sub must be a non-empty string")
    if "exp" in payload and (isinstance(payload["exp"], bool) or not isinstance(payload["exp"], (int, float))):
        raise InvalidPayloadSchema("exp must be numeric epoch seconds")

    issuer = vc.get("issuer")
    issuer_id = issuer.get("id") if isinstance(issuer, dict) else issuer
    if issuer_id != payload["iss"]:
        raise InvalidPayloadSchema("iss does not match vc.issuer")

    subject = vc.get("credentialSubject")
    if not isinstance(subject, dict) or subject.get("id") != payload["sub"]:
        raise InvalidPayloadSchema("sub does not match vc.credentialSubject.id")

def decode(token: str) -> DecodedToken:
    """
    Structural decode only. Raises a DecodeError subclass; never checks the signature.
    """
    if not isinstance(token, str):
        raise MalformedStructure("token must be a string")

    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedStructure(f"expected 3 segments, got {len(parts)}")
    h_seg, p_seg, s_seg = parts

    header = _parse_json_segment(h_seg, "header")
    payload = _parse_json_segment(p_seg, "payload")
    signature = b64url_decode(s_seg)
    if len(signature) != SIGNATURE_LEN:
        raise InvalidSignatureLength(f"signature must be {SIGNATURE_LEN} bytes, got {len(signature)}")

    validate_header(header)
    validate_payload(payload)

    return DecodedToken(
        header=header,
        payload=payload,
        signature=signature,
        signing_input=(h_seg + "." + p_seg).encode("ascii"),
    )
