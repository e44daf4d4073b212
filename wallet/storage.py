from pathlib import Path
import json
from typing import Any, Dict, Optional

from vccore.config import DEFAULT_WALLET_DIR

def bundle_path(student_id: str, wallet_dir: Optional[Path] = None) -> Path:
    return Path(wallet_dir or DEFAULT_WALLET_DIR) / f"credential_{student_id}.json"  # {"studentId":..., "jwt":...}

def save_credential_bundle(bundle: Dict[str, Any], wallet_dir: Optional[Path] = None) -> Path:
    path = bundle_path(bundle["studentId"], wallet_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(bundle, indent=2, sort_keys=True), encoding="utf-8")
    return path

def load_credential_bundle(student_id: str, wallet_dir: Optional[Path] = None) -> Dict[str, Any]:
    path = bundle_path(student_id, wallet_dir)
    if not path.exists():
        raise FileNotFoundError(f"No credential stored for {student_id}. Run wallet fetch first.")
    return json.loads(path.read_text(encoding="utf-8"))
