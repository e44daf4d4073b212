import argparse
from pathlib import Path
from typing import Optional

import requests

from issuer.credential import is_valid_identifier
from vccore.config import Settings
from vccore.logger import get_logger
from wallet.storage import save_credential_bundle

log = get_logger("studentvc.wallet")

FETCH_TIMEOUT_S = 5

def fetch(student_id: str, issuer_url: str, wallet_dir: Optional[Path] = None) -> Path:
    """Download a student's token from the issuer service into the wallet."""
    if not is_valid_identifier(student_id):
        raise ValueError(f"invalid student id: {student_id!r}")

    r = requests.get(f"{issuer_url.rstrip('/')}/credentials/{student_id}", timeout=FETCH_TIMEOUT_S)
    r.raise_for_status()
    record = r.json()

    bundle = {
        "studentId": student_id,
        "jwt": record["jwt"],
        "issuer": record.get("credential", {}).get("issuer", {}).get("id"),
    }
    path = save_credential_bundle(bundle, wallet_dir)
    log.info(f"stored credential for student={student_id} in {path}")
    return path

if __name__ == "__main__":
    settings = Settings.from_env()
    p = argparse.ArgumentParser()
    p.add_argument("student_id")
    p.add_argument("--issuer_url", default=settings.issuer_url)
    p.add_argument("--wallet_dir", default=str(settings.wallet_dir))
    args = p.parse_args()
    saved = fetch(args.student_id, args.issuer_url, Path(args.wallet_dir))
    print(f"Credential saved to {saved}")
