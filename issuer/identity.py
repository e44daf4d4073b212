from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from Crypto.Random import get_random_bytes

from vccore.config import Settings
from vccore.errors import KeyGenerationError
from vccore.keys import IdentityKey, generate
from vccore.logger import get_logger

log = get_logger("studentvc.identity")

SEED_BYTES = 32

@dataclass(frozen=True)
class Issuer:
    """The fixed university issuer. Built once at startup and passed explicitly."""
    key: IdentityKey
    name: str
    location: str = ""
    website: str = ""

    @property
    def did(self) -> str:
        return self.key.identifier

    def profile(self) -> Dict[str, Any]:
        return {
            "did": self.did,
            "name": self.name,
            "location": self.location,
            "website": self.website,
        }

def _read_seed(seed_path: Path) -> bytes:
    try:
        raw = seed_path.read_text(encoding="utf-8").strip()
    except OSError as e:
        raise KeyGenerationError(f"issuer seed file unreadable: {seed_path}") from e
    if not raw:
        raise KeyGenerationError(f"issuer seed file is empty: {seed_path}")
    return raw.encode("utf-8")

def _write_new_seed(seed_path: Path) -> bytes:
    seed_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        seed = get_random_bytes(SEED_BYTES).hex().encode("ascii")
    except (OSError, NotImplementedError) as e:
        raise KeyGenerationError("entropy source unavailable") from e

    # O_EXCL: two processes racing on first start must not both create a seed
    fd = os.open(str(seed_path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(seed + b"\n")
    return seed

def load_or_init(seed_path: Path, seed: Optional[str] = None) -> IdentityKey:
    """
    Two-state initialisation of the issuer key:
      - a configured seed or an existing seed file: derive deterministically, never regenerate
      - nothing yet: create a random seed, persist it (0600), derive from it
    The seed is the persisted secret; the derived key never touches disk.
    """
    if seed:
        return generate(seed.encode("utf-8"))

    if seed_path.exists():
        return generate(_read_seed(seed_path))

    try:
        new_seed = _write_new_seed(seed_path)
    except FileExistsError:
        return generate(_read_seed(seed_path))
    key = generate(new_seed)
    log.info(f"initialised new issuer seed at {seed_path} did={key.identifier}")
    return key

def save_issuer_profile(issuer: Issuer, path: Path) -> None:
    """Public issuer profile for relying parties. Contains no key material."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = issuer.profile()
    data["createdAt"] = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    if path.exists():
        try:
            existing = json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            existing = {}
        if existing.get("did") == issuer.did:
            data["createdAt"] = existing.get("createdAt", data["createdAt"])
    path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

def load_issuer(settings: Settings) -> Issuer:
    key = load_or_init(settings.seed_path, settings.issuer_seed)
    issuer = Issuer(
        key=key,
        name=settings.issuer_name,
        location=settings.issuer_location,
        website=settings.issuer_website,
    )
    save_issuer_profile(issuer, settings.issuer_profile_path)
    log.info(f"using fixed issuer did={issuer.did}")
    return issuer
