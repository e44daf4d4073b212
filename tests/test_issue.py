import json
from datetime import timedelta
from pathlib import Path

from issuer.identity import load_issuer
from issuer.issue import DEFAULT_VALIDITY_DAYS, StudentData, issue_student_credential, sign_credential
from vccore import jwt
from vccore.config import Settings
from vccore.keys import generate


def test_token_claims(alice, issuer, now):
    decoded = jwt.decode(alice.jwt)
    assert decoded.header == {"alg": "EdDSA", "typ": "JWT"}
    p = decoded.payload
    assert p["iss"] == issuer.did
    assert p["sub"] == "S1"
    assert p["jti"] == alice.credential["id"]
    assert p["nbf"] == int(now.timestamp())
    assert p["exp"] == int((now + timedelta(days=365)).timestamp())
    assert p["vc"] == alice.credential


def test_student_defaults(alice):
    subject = alice.credential["credentialSubject"]
    assert subject["directedBy"] == "Example University"
    assert subject["location"] == "University Campus"
    assert alice.credential["credentialStatus"]["id"].endswith("/S1")


def test_default_validity(issuer, store, now):
    issued = issue_student_credential(issuer, store, StudentData("S5", "Dan", "Physics"), now=now)
    assert jwt.decode(issued.jwt).payload["exp"] == int((now + timedelta(days=DEFAULT_VALIDITY_DAYS)).timestamp())


def test_reissue_replaces_record(alice, issuer, store, now):
    later = now + timedelta(days=1)
    again = issue_student_credential(issuer, store, StudentData("S1", "Alice", "CS"), now=later)
    assert store.get("S1").token == again.jwt != alice.jwt


def test_signing_is_reproducible(issuer, now):
    t1 = sign_credential({"issuer": {"id": issuer.did}, "credentialSubject": {"id": "S1"}, "id": "x"}, issuer.key, now)
    t2 = sign_credential({"issuer": {"id": issuer.did}, "credentialSubject": {"id": "S1"}, "id": "x"}, issuer.key, now)
    assert t1 == t2


def test_load_issuer_writes_public_profile_only(tmp_path):
    settings = Settings(storage_dir=tmp_path, issuer_seed="seed-A")
    issuer = load_issuer(settings)
    assert issuer.did == generate(b"seed-A").identifier

    profile = json.loads(settings.issuer_profile_path.read_text())
    assert profile["did"] == issuer.did
    assert issuer.key.private_key.hex() not in settings.issuer_profile_path.read_text()

    created = profile["createdAt"]
    load_issuer(settings)
    assert json.loads(settings.issuer_profile_path.read_text())["createdAt"] == created


def test_settings_from_env():
    settings = Settings.from_env({
        "VC_STORAGE_DIR": "/srv/vc",
        "VC_ISSUER_SEED": "s",
        "VC_FAIL_CLOSED": "true",
    })
    assert settings.storage_dir == Path("/srv/vc")
    assert settings.credentials_dir == Path("/srv/vc/credentials")
    assert settings.issuer_seed == "s"
    assert settings.fail_closed is True
    assert Settings.from_env({}).fail_closed is False
