from datetime import datetime, timedelta, timezone

import pytest

from issuer.credential import (
    BASE_TYPE,
    build_credential,
    from_iso,
    is_valid_identifier,
    status_descriptor,
    student_claims,
    to_iso,
)

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def build(**kw):
    args = dict(
        issuer_identifier="did:key:z6MkIssuer",
        issuer_name="Example University",
        subject_id="S1",
        subject_claims={"name": "Alice", "title": "CS"},
        issuance_time=T0,
        expiration_time=T0 + timedelta(days=365),
    )
    args.update(kw)
    return build_credential(**args)


def test_schema_fields():
    vc = build(status=status_descriptor("https://university.edu/credentials/status/", "S1"))
    assert vc["@context"][0] == "https://www.w3.org/2018/credentials/v1"
    assert vc["type"][0] == BASE_TYPE
    assert vc["id"] == f"urn:credential:S1-{int(T0.timestamp() * 1000)}"
    assert vc["issuer"] == {"id": "did:key:z6MkIssuer", "name": "Example University"}
    assert vc["issuanceDate"] == "2026-03-01T12:00:00Z"
    assert vc["expirationDate"] == "2027-03-01T12:00:00Z"
    assert vc["credentialStatus"] == {
        "id": "https://university.edu/credentials/status/S1",
        "type": "StudentCredentialStatusList2025",
    }


def test_subject_id_injected_first():
    vc = build(subject_claims={"name": "Alice", "id": "someone-else"})
    assert list(vc["credentialSubject"]) == ["id", "name"]
    assert vc["credentialSubject"]["id"] == "S1"


def test_base_type_not_duplicated():
    vc = build(credential_types=[BASE_TYPE, "UniversityDegreeCredential"])
    assert vc["type"] == [BASE_TYPE, "UniversityDegreeCredential"]


def test_optional_fields_omitted():
    vc = build(expiration_time=None)
    assert "expirationDate" not in vc
    assert "credentialStatus" not in vc


def test_expiration_before_issuance_is_not_rejected():
    vc = build(expiration_time=T0 - timedelta(seconds=1))
    assert vc["expirationDate"] < vc["issuanceDate"]


def test_is_pure():
    assert build() == build()


@pytest.mark.parametrize("subject_id", ["", " S1", "../etc", "a/b", ".hidden", None])
def test_rejects_malformed_subject(subject_id):
    with pytest.raises(ValueError):
        build(subject_id=subject_id)
    assert not is_valid_identifier(subject_id)


def test_rejects_malformed_issuer():
    with pytest.raises(ValueError):
        build(issuer_identifier="not an id")


def test_iso_helpers():
    assert from_iso("2026-03-01T12:00:00Z") == T0
    assert to_iso(datetime(2026, 3, 1, 12, 0, 0, 999)) == "2026-03-01T12:00:00Z"


def test_student_claims_drops_unset():
    claims = student_claims(name="Alice", title="CS", location="Campus")
    assert claims == {"name": "Alice", "title": "CS", "location": "Campus"}
