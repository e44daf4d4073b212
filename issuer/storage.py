"""
issuer.storage
--------------
Credential persistence: subject id -> {token, status, timestamps}.

FileCredentialStore keeps one JSON file per subject in a directory
(<dir>/<subject_id>.json). Writers of the same subject are serialised with a
per-subject thread lock plus an flock on <dir>/.<subject_id>.lock, so the
read-modify-write in set_status is atomic against other processes sharing the
directory. Every write is an atomic temp-file + os.replace.
Re-issuing for a subject overwrites the previous record.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from issuer.credential import is_valid_identifier
from vccore.errors import StorageError
from vccore.logger import get_logger

log = get_logger("studentvc.storage")

class CredentialStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace('+00:00', 'Z')

@dataclass(frozen=True)
class StoredRecord:
    subject_id: str
    token: str
    status: CredentialStatus = CredentialStatus.ACTIVE
    issued_at: str = field(default_factory=utc_now_iso)
    status_updated_at: Optional[str] = None
    credential: Optional[Dict[str, Any]] = None

    @property
    def active(self) -> bool:
        return self.status == CredentialStatus.ACTIVE

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "studentId": self.subject_id,
            "credential": self.credential,
            "jwt": self.token,
            "issuedAt": self.issued_at,
            "status": self.status.value,
        }
        if self.status_updated_at:
            data["statusUpdatedAt"] = self.status_updated_at
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "StoredRecord":
        return cls(
            subject_id=data["studentId"],
            token=data["jwt"],
            status=CredentialStatus(data.get("status", CredentialStatus.ACTIVE.value)),
            issued_at=data.get("issuedAt") or utc_now_iso(),
            status_updated_at=data.get("statusUpdatedAt"),
            credential=data.get("credential"),
        )

def _check_subject(subject_id: str) -> None:
    if not is_valid_identifier(subject_id):
        raise ValueError(f"invalid subject identifier: {subject_id!r}")

class CredentialStore:
    """Contract the issuance and verification code relies on."""

    def put(self, subject_id: str, token: str, initial_status: str = "active",
            credential: Optional[Dict[str, Any]] = None) -> StoredRecord:
        raise NotImplementedError

    def get(self, subject_id: str) -> Optional[StoredRecord]:
        raise NotImplementedError

    def list(self) -> List[StoredRecord]:
        raise NotImplementedError

    def set_status(self, subject_id: str, status: str) -> bool:
        raise NotImplementedError

class _SubjectLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def __call__(self, subject_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(subject_id)
            if lock is None:
                lock = self._locks[subject_id] = threading.Lock()
            return lock

class InMemoryCredentialStore(CredentialStore):

    def __init__(self) -> None:
        self._records: Dict[str, StoredRecord] = {}
        self._lock = threading.Lock()

    def put(self, subject_id, token, initial_status="active", credential=None):
        _check_subject(subject_id)
        record = StoredRecord(
            subject_id=subject_id,
            token=token,
            status=CredentialStatus(initial_status),
            credential=credential,
        )
        with self._lock:
            self._records[subject_id] = record
        return record

    def get(self, subject_id):
        with self._lock:
            return self._records.get(subject_id)

    def list(self):
        with self._lock:
            return list(self._records.values())

    def set_status(self, subject_id, status):
        status = CredentialStatus(status)
        with self._lock:
            record = self._records.get(subject_id)
            if record is None:
                return False
            self._records[subject_id] = replace(record, status=status, status_updated_at=utc_now_iso())
        return True

class FileCredentialStore(CredentialStore):

    def __init__(self, directory) -> None:
        self.directory = Path(directory)
        self._locks = _SubjectLocks()

    def _path(self, subject_id: str) -> Path:
        _check_subject(subject_id)
        return self.directory / f"{subject_id}.json"

    @contextmanager
    def _locked(self, subject_id: str) -> Iterator[None]:
        with self._locks(subject_id):
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                fd = os.open(self.directory / f".{subject_id}.lock", os.O_RDWR | os.O_CREAT, 0o600)
            except OSError as e:
                raise StorageError(f"failed to lock subject {subject_id}: {e}") from e
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                yield
            finally:
                os.close(fd)

    def _write(self, path: Path, record: StoredRecord) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.directory), prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(record.to_json(), f, indent=2)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageError(f"failed to write {path}: {e}") from e

    def _read(self, path: Path) -> Optional[StoredRecord]:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return StoredRecord.from_json(data)
        except OSError as e:
            raise StorageError(f"failed to read {path}: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"corrupt credential record {path}: {e}") from e

    def put(self, subject_id, token, initial_status="active", credential=None):
        path = self._path(subject_id)
        record = StoredRecord(
            subject_id=subject_id,
            token=token,
            status=CredentialStatus(initial_status),
            credential=credential,
        )
        with self._locked(subject_id):
            if path.exists():
                log.warning(f"overwriting existing credential record for subject={subject_id}")
            self._write(path, record)
        log.info(f"stored credential subject={subject_id} path={path}")
        return record

    def get(self, subject_id):
        return self._read(self._path(subject_id))

    def list(self):
        if not self.directory.exists():
            return []
        records = []
        for path in sorted(self.directory.glob("*.json")):
            if path.name.startswith("."):
                continue
            record = self._read(path)
            if record is not None:
                records.append(record)
        return records

    def set_status(self, subject_id, status):
        status = CredentialStatus(status)
        path = self._path(subject_id)
        with self._locked(subject_id):
            record = self._read(path)
            if record is None:
                return False
            self._write(path, replace(record, status=status, status_updated_at=utc_now_iso()))
        log.info(f"status updated subject={subject_id} status={status.value}")
        return True
