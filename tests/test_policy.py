from datetime import timedelta

from issuer.issue import StudentData, issue_student_credential, revoke_student_credential
from verifier.policy import (
    check_expiration,
    validate_credential,
    validate_issuer,
    validate_subject,
)
from verifier.resolvers import store_status_resolver
from verifier.verify import verify_token


def test_validate_issuer(alice, now):
    result = verify_token(alice.jwt, now=now)
    did = alice.credential["issuer"]["id"]
    assert validate_issuer(result, [did]).valid
    check = validate_issuer(result, ["did:key:z6MkSomeoneElse"])
    assert not check.valid
    assert check.reason == "Issuer not in trusted list"


def test_validate_subject(alice, now):
    result = verify_token(alice.jwt, now=now)
    assert validate_subject(result, "S1").valid
    check = validate_subject(result, "S2")
    assert not check.valid
    assert check.details == {"expectedSubject": "S2", "actualSubject": "S1"}


def test_checks_on_unverified_result(now):
    result = verify_token("garbage", now=now)
    assert not validate_issuer(result, ["x"]).valid
    assert not validate_subject(result, "S1").valid
    assert check_expiration(result).valid is None


def test_check_expiration(alice, now):
    result = verify_token(alice.jwt, now=now)
    assert check_expiration(result, now).valid
    late = check_expiration(result, now + timedelta(days=400))
    assert not late.valid
    assert late.details["expired"] is True
    assert late.reason.startswith("Expired on ")


def test_validate_credential_all_good(alice, store, now):
    result = verify_token(alice.jwt, now=now, status_resolver=store_status_resolver(store))
    out = validate_credential(
        result,
        trusted_issuers=[alice.credential["issuer"]["id"]],
        expected_subject="S1",
        now=now,
    )
    assert out.valid
    assert out.issuer_trusted and out.subject_valid
    assert out.expired is False
    assert out.errors == []


def test_validate_credential_collects_errors(issuer, store, now):
    past = (now - timedelta(days=1)).isoformat()
    issued = issue_student_credential(issuer, store, StudentData("S9", "Eve", "Art", expiry_date=past), now=now)
    revoke_student_credential(store, "S9")
    result = verify_token(issued.jwt, now=now, status_resolver=store_status_resolver(store))

    out = validate_credential(result, trusted_issuers=["did:key:z6MkOther"], expected_subject="S1", now=now)
    assert out.signature_valid
    assert not out.valid
    assert out.expired is True
    assert out.status_active is False
    assert len(out.errors) == 4


def test_validate_credential_bad_signature(alice, now):
    out = validate_credential(verify_token(alice.jwt[:-5] + "AAAAA", now=now))
    assert not out.signature_valid
    assert out.errors == ["Signature verification failed (BAD_SIGNATURE)"]
