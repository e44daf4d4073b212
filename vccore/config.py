"""
vccore.config
-------------
Runtime configuration. Every setting has a module-level default that can be
overridden through the environment; CLI flags override both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_STORAGE_DIR = Path(".storage")
DEFAULT_WALLET_DIR = Path("wallet_data")
DEFAULT_ISSUER_URL = "http://127.0.0.1:5001"

ISSUER_NAME = "Example University"
ISSUER_LOCATION = "University Campus"
ISSUER_WEBSITE = "https://university.edu"
STATUS_BASE_URL = "https://university.edu/credentials/status"

SEED_FILENAME = "issuer-seed"
ISSUER_PROFILE_FILENAME = "issuer.json"
CREDENTIALS_DIRNAME = "credentials"

_TRUTHY = {"1", "true", "yes", "on"}

@dataclass(frozen=True)
class Settings:
    storage_dir: Path = DEFAULT_STORAGE_DIR
    wallet_dir: Path = DEFAULT_WALLET_DIR
    issuer_url: str = DEFAULT_ISSUER_URL
    issuer_seed: Optional[str] = None
    issuer_name: str = ISSUER_NAME
    issuer_location: str = ISSUER_LOCATION
    issuer_website: str = ISSUER_WEBSITE
    status_base_url: str = STATUS_BASE_URL
    fail_closed: bool = False

    @property
    def seed_path(self) -> Path:
        return self.storage_dir / SEED_FILENAME

    @property
    def issuer_profile_path(self) -> Path:
        return self.storage_dir / ISSUER_PROFILE_FILENAME

    @property
    def credentials_dir(self) -> Path:
        return self.storage_dir / CREDENTIALS_DIRNAME

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            storage_dir=Path(env.get("VC_STORAGE_DIR", str(DEFAULT_STORAGE_DIR))),
            wallet_dir=Path(env.get("VC_WALLET_DIR", str(DEFAULT_WALLET_DIR))),
            issuer_url=env.get("VC_ISSUER_URL", DEFAULT_ISSUER_URL),
            issuer_seed=env.get("VC_ISSUER_SEED") or None,
            issuer_name=env.get("VC_ISSUER_NAME", ISSUER_NAME),
            issuer_location=env.get("VC_ISSUER_LOCATION", ISSUER_LOCATION),
            issuer_website=env.get("VC_ISSUER_WEBSITE", ISSUER_WEBSITE),
            status_base_url=env.get("VC_STATUS_BASE_URL", STATUS_BASE_URL),
            fail_closed=env.get("VC_FAIL_CLOSED", "").strip().lower() in _TRUTHY,
        )
