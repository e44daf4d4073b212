import argparse
import json
from pathlib import Path
from typing import Optional

from verifier.resolvers import remote_status_resolver
from verifier.verify import VerificationResult, verify_token
from vccore.config import Settings
from wallet.storage import load_credential_bundle

def verify_stored(
    student_id: str,
    trusted_issuer: Optional[str] = None,
    issuer_url: Optional[str] = None,
    wallet_dir: Optional[Path] = None,
) -> VerificationResult:
    """
    Verify a wallet credential offline against its did:key issuer.
    With an issuer URL, revocation is checked against the issuer's signed status list.
    """
    bundle = load_credential_bundle(student_id, wallet_dir)
    token = bundle["jwt"]

    status_resolver = None
    if issuer_url:
        issuer_id = trusted_issuer or bundle.get("issuer")
        if issuer_id:
            status_resolver = remote_status_resolver(issuer_url, issuer_id)

    return verify_token(
        token,
        status_resolver=status_resolver,
        trusted_issuers=[trusted_issuer] if trusted_issuer else None,
    )

def main():
    settings = Settings.from_env()
    p = argparse.ArgumentParser()
    p.add_argument("student_id")
    p.add_argument("--trusted_issuer", default=None)
    p.add_argument("--issuer_url", default=None, help="Check revocation against this issuer's status list")
    p.add_argument("--wallet_dir", default=str(settings.wallet_dir))
    args = p.parse_args()

    result = verify_stored(args.student_id, args.trusted_issuer, args.issuer_url, Path(args.wallet_dir))
    print("Stored credential signature valid:", result.verified)
    print(json.dumps(result.to_dict(), indent=2))

if __name__ == "__main__":
    main()
