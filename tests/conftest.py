from datetime import datetime, timedelta, timezone

import pytest

from issuer.identity import Issuer
from issuer.issue import StudentData, issue_student_credential
from issuer.storage import FileCredentialStore
from vccore.keys import generate

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def issuer():
    return Issuer(key=generate(b"seed-A"), name="Example University", location="University Campus")


@pytest.fixture
def store(tmp_path):
    return FileCredentialStore(tmp_path / "credentials")


@pytest.fixture
def alice(issuer, store, now):
    student = StudentData(
        student_id="S1",
        name="Alice",
        title="CS",
        expiry_date=(now + timedelta(days=365)).isoformat(),
    )
    return issue_student_credential(issuer, store, student, now=now)
