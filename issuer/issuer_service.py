from __future__ import annotations

from typing import Optional

from flask import Flask, current_app, jsonify, request

from issuer.identity import load_issuer
from issuer.issue import (
    StudentData,
    issue_student_credential,
    revoke_student_credential,
    verify_student_credential,
)
from issuer.statuslist import build_statuslist
from issuer.storage import CredentialStore, FileCredentialStore
from vccore.config import Settings
from vccore.errors import StoreInconsistency
from vccore.logger import get_logger

log = get_logger("studentvc.service")

REQUIRED_FIELDS = ("studentId", "name", "title")

def create_app(settings: Optional[Settings] = None, store: Optional[CredentialStore] = None) -> Flask:
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["ISSUER"] = load_issuer(settings)
    app.config["STORE"] = store or FileCredentialStore(settings.credentials_dir)

    @app.post('/issue')
    def issue():
        """
        Request JSON:
        {
            "studentId": "2025001",
            "name": "...",
            "title": "...",
            "description": "..." (optional),
            "expiryDate": ISO-8601 (optional),
            "directedBy": "..." (optional),
            "location": "..." (optional)
        }
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "JSON object body required"}), 400

        missing = [f for f in REQUIRED_FIELDS if not isinstance(data.get(f), str) or not data.get(f)]
        if missing:
            return jsonify({"error": f"Missing required fields: {missing}"}), 400

        try:
            issued = issue_student_credential(
                current_app.config["ISSUER"],
                current_app.config["STORE"],
                StudentData.from_json(data),
                status_base_url=settings.status_base_url,
            )
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({
            "studentId": issued.student_id,
            "credential": issued.credential,
            "jwt": issued.jwt,
        }), 201

    @app.get("/credentials")
    def list_credentials():
        records = current_app.config["STORE"].list()
        return jsonify([
            {"studentId": r.subject_id, "status": r.status.value, "issuedAt": r.issued_at}
            for r in records
        ])

    @app.get("/credentials/<student_id>")
    def get_credential(student_id):
        try:
            record = current_app.config["STORE"].get(student_id)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        if record is None:
            return jsonify({"error": f"Credential not found for student ID: {student_id}"}), 404
        return jsonify(record.to_json())

    @app.post("/verify")
    def verify():
        data = request.get_json(silent=True) or {}
        token = data.get("jwt")
        student_id = data.get("studentId")
        if not token and not student_id:
            return jsonify({"error": "jwt or studentId required"}), 400

        trusted = data.get("trustedIssuers")
        if trusted is not None and (
                not isinstance(trusted, list) or not all(isinstance(t, str) for t in trusted)):
            return jsonify({"error": "trustedIssuers must be a list of issuer identifiers"}), 400
        try:
            # a posted token is verified as-is; studentId alone loads the stored one
            result = verify_student_credential(
                current_app.config["STORE"], student_id or "", token=token,
                trusted_issuers=trusted, fail_closed=settings.fail_closed,
            )
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        except StoreInconsistency as e:
            return jsonify({"error": str(e)}), 404
        return jsonify(result.to_dict())

    @app.post("/revoke")
    def revoke():
        data = request.get_json(silent=True) or {}
        student_id = data.get("studentId")
        if not student_id:
            return jsonify({"error": "studentId required"}), 400
        try:
            ok = revoke_student_credential(current_app.config["STORE"], student_id)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        if not ok:
            return jsonify({"error": f"Credential not found for student ID: {student_id}"}), 404
        return jsonify({"revoked": student_id})

    @app.get("/statuslist")
    def statuslist():
        return jsonify(build_statuslist(current_app.config["ISSUER"].key, current_app.config["STORE"]))

    @app.get("/issuer")
    def issuer_profile():
        return jsonify(current_app.config["ISSUER"].profile())

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    log.info(f"issuer service ready did={app.config['ISSUER'].did}")
    return app

if __name__ == '__main__':
    create_app().run(host='127.0.0.1', port=5001)
