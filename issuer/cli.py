"""
Command-line tool for the university credential issuer.

    studentvc issue --student-id 2025001 --name "Alice" --title "Computer Science"
    studentvc verify 2025001
    studentvc list
    studentvc revoke 2025001
    studentvc extract 2025001 --format both
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from issuer.credential import to_iso, utc_now
from issuer.identity import load_issuer
from issuer.issue import (
    StudentData,
    issue_student_credential,
    revoke_student_credential,
    verify_student_credential,
)
from issuer.storage import FileCredentialStore
from vccore.config import Settings
from vccore.errors import CredentialError, StoreInconsistency

def _settings(args) -> Settings:
    settings = Settings.from_env()
    return settings.with_overrides(
        storage_dir=Path(args.storage_dir) if args.storage_dir else None,
    )

def _store(settings: Settings) -> FileCredentialStore:
    return FileCredentialStore(settings.credentials_dir)

def cmd_issue(args) -> int:
    settings = _settings(args)
    issuer = load_issuer(settings)

    expiry_date = args.expiry_date
    if not expiry_date and args.expiry_days is not None:
        expiry_date = to_iso(utc_now() + timedelta(days=args.expiry_days))

    student = StudentData(
        student_id=args.student_id,
        name=args.name,
        title=args.title,
        description=args.description,
        date_of_issue=args.date_of_issue or to_iso(utc_now())[:10],
        expiry_date=expiry_date,
        directed_by=args.directed_by,
        location=args.location,
    )
    issued = issue_student_credential(issuer, _store(settings), student,
                                      status_base_url=settings.status_base_url)

    print(f"✓ Issued credential for student: {student.name}")
    print(f"  Student ID: {student.student_id}")
    print(f"  Issuer DID: {issuer.did}")
    print(f"  Expires:    {issued.credential.get('expirationDate', '-')}")
    print()
    print("JWT Token:")
    print(issued.jwt)
    return 0

def cmd_verify(args) -> int:
    settings = _settings(args)
    token = args.jwt.strip() if args.jwt else None
    trusted = args.trusted_issuer or None
    try:
        result = verify_student_credential(
            _store(settings),
            args.student_id,
            token=token,
            trusted_issuers=trusted,
            fail_closed=args.fail_closed or settings.fail_closed,
        )
    except StoreInconsistency as e:
        print(f"✗ {e}")
        return 1

    if not result.verified:
        print("✗ VERIFICATION FAILED")
        print(f"  Reason: {result.reason.value}")
        print(f"  Detail: {result.detail}")
        return 1

    print("✓ VERIFICATION SUCCESSFUL")
    print(f"  Issuer:     {result.issuer.get('id')} ({result.issuer.get('name', '')})")
    print(f"  Subject:    {result.subject_id}")
    print(f"  Issued:     {result.issuance_date}")
    if result.expiration_date:
        print(f"  Expiration: {result.expiration_date} {'[EXPIRED]' if result.expired else '[VALID]'}")
    print(f"  Status:     {'ACTIVE' if result.status_active else 'INACTIVE'} ({result.status})")
    if result.trusted is not None:
        print(f"  Trusted:    {'yes' if result.trusted else 'NO'}")
    print()
    print("Credential Subject Data:")
    print(json.dumps(result.credential_subject, indent=2))
    return 0

def cmd_list(args) -> int:
    records = _store(_settings(args)).list()
    if not records:
        print("No credentials issued yet.")
        return 0
    print(f"=== {len(records)} issued credential(s) ===")
    for r in records:
        subject = (r.credential or {}).get("credentialSubject", {})
        print(f"- {r.subject_id:<12} {subject.get('name', ''):<24} {subject.get('title', ''):<24} "
              f"{r.status.value:<8} issued {r.issued_at}")
    return 0

def cmd_revoke(args) -> int:
    if revoke_student_credential(_store(_settings(args)), args.student_id):
        print(f"Revoked credential for student: {args.student_id}")
        return 0
    print(f"Credential not found for student: {args.student_id}")
    return 1

def cmd_extract(args) -> int:
    record = _store(_settings(args)).get(args.student_id)
    if record is None:
        print(f"✗ Credential not found for student: {args.student_id}")
        return 1

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    subject = (record.credential or {}).get("credentialSubject", {})

    print(f"=== Student Credential: {record.subject_id} ===")
    print(f"Name: {subject.get('name', '')}")
    print(f"Program: {subject.get('title', '')}")
    print(f"Status: {record.status.value}")
    print()

    if args.format in ("jwt", "both"):
        jwt_file = out_dir / f"student_{record.subject_id}_vc.jwt"
        jwt_file.write_text(record.token, encoding="utf-8")
        print("=== JWT Token ===")
        print(record.token)
        print(f"✓ JWT saved to: {jwt_file}")
        print()

    if args.format in ("full", "both"):
        vc_file = out_dir / f"student_{record.subject_id}_vc.json"
        vc_file.write_text(json.dumps(record.credential, indent=2), encoding="utf-8")
        print("=== Full Verifiable Credential ===")
        print(json.dumps(record.credential, indent=2))
        print(f"✓ Full VC saved to: {vc_file}")
    return 0

def cmd_issuer(args) -> int:
    issuer = load_issuer(_settings(args))
    print(json.dumps(issuer.profile(), indent=2))
    return 0

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="studentvc", description="University verifiable credential tool")
    p.add_argument("--storage-dir", default=None, help="Override VC_STORAGE_DIR")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("issue", help="Issue a credential for a student")
    s.add_argument("--student-id", required=True)
    s.add_argument("--name", required=True)
    s.add_argument("--title", required=True)
    s.add_argument("--description", default=None)
    s.add_argument("--date-of-issue", default=None)
    exp = s.add_mutually_exclusive_group()
    exp.add_argument("--expiry-date", default=None, help="ISO-8601 expiration date")
    exp.add_argument("--expiry-days", type=int, default=None)
    s.add_argument("--directed-by", default=None)
    s.add_argument("--location", default=None)
    s.set_defaults(func=cmd_issue)

    s = sub.add_parser("verify", help="Verify a student's credential")
    s.add_argument("student_id")
    s.add_argument("--jwt", default=None, help="Verify this token instead of the stored one")
    s.add_argument("--trusted-issuer", action="append", default=None)
    s.add_argument("--fail-closed", action="store_true")
    s.set_defaults(func=cmd_verify)

    s = sub.add_parser("list", help="List issued credentials")
    s.set_defaults(func=cmd_list)

    s = sub.add_parser("revoke", help="Revoke a student's credential")
    s.add_argument("student_id")
    s.set_defaults(func=cmd_revoke)

    s = sub.add_parser("extract", help="Export a student's credential")
    s.add_argument("student_id")
    s.add_argument("--format", choices=("jwt", "full", "both"), default="jwt")
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_extract)

    s = sub.add_parser("issuer", help="Show the fixed issuer identity")
    s.set_defaults(func=cmd_issuer)
    return p

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (CredentialError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
