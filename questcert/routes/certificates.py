from __future__ import annotations

import dataclasses
import os
import re
from datetime import date

from flask import Blueprint, abort, current_app, jsonify, request, send_from_directory

from ..shared.certificates import CertificateRequest, render_certificate_sync
from ..shared.errors import CertificateRenderError
from ..shared.numbers import build_verify_url, generate_cert_no, next_certificate_serial
from ..shared.storage import certificate_dir

bp = Blueprint("certificates", __name__, url_prefix="/certificates")
verify_bp = Blueprint("verify", __name__)

_CERT_NO_PATTERN = re.compile(r"^[A-Za-z]+-[A-Za-z]+-(\d{4})-\d+$")


def _render_options() -> dict:
    cfg = current_app.config
    return {
        "photo_root": cfg.get("PHOTO_ROOT"),
        "restrict_photo_root": bool(cfg.get("PHOTO_RESTRICT_TO_ROOT", True)),
        "photo_timeout": cfg.get("PHOTO_FETCH_TIMEOUT"),
        "date_locale": cfg.get("CERT_DATE_LOCALE", "en-US"),
        "branding": cfg.get("CERT_BRANDING"),
    }


@bp.post("/issue")
def issue():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"ok": False, "message": "JSON body required"}), 400

    site_root = current_app.config["SITE_ROOT"]
    year = date.today().year
    out_dir = certificate_dir(site_root, year)
    cert_no = generate_cert_no(next_certificate_serial(out_dir, year), year)
    verify_url = build_verify_url(current_app.config["PUBLIC_APP_URL"], cert_no)

    output_path = os.path.join(out_dir, f"{cert_no}.pdf")
    try:
        cert_request = CertificateRequest.from_payload(payload, output_path=output_path)
    except ValueError as exc:
        return jsonify({"ok": False, "message": str(exc)}), 400
    # Number, URL and path are server-assigned; client aliases for them are ignored.
    cert_request = dataclasses.replace(
        cert_request,
        output_path=output_path,
        certificate_number=cert_no,
        verification_url=verify_url,
        issue_date=cert_request.issue_date or date.today(),
    )
    if not cert_request.student_name or not cert_request.course_title:
        return jsonify({"ok": False, "message": "studentName and courseTitle are required"}), 400

    try:
        out_path = render_certificate_sync(cert_request, **_render_options())
    except CertificateRenderError as exc:
        current_app.logger.exception("[CERT-FAIL] cert_no=%s", cert_no)
        return jsonify({"ok": False, "message": str(exc)}), 500

    rel_path = os.path.relpath(out_path, site_root).replace(os.sep, "/")
    current_app.logger.info("[CERT] issued cert_no=%s path=%s", cert_no, rel_path)
    return (
        jsonify(
            {
                "ok": True,
                "message": "Certificate generated",
                "data": {"certNo": cert_no, "verifyUrl": verify_url, "pdfPath": rel_path},
            }
        ),
        201,
    )


@bp.get("/<int:year>/<path:filename>")
def download(year: int, filename: str):
    directory = certificate_dir(current_app.config["SITE_ROOT"], year)
    if not filename.lower().endswith(".pdf"):
        abort(404)
    return send_from_directory(directory, filename, mimetype="application/pdf")


@verify_bp.get("/verify/<cert_no>")
def verify(cert_no: str):
    match = _CERT_NO_PATTERN.match(cert_no)
    if match:
        site_root = current_app.config["SITE_ROOT"]
        pdf_path = os.path.join(certificate_dir(site_root, int(match.group(1))), f"{cert_no}.pdf")
        if os.path.isfile(pdf_path):
            rel_path = os.path.relpath(pdf_path, site_root).replace(os.sep, "/")
            return jsonify({"ok": True, "data": {"certNo": cert_no, "pdfPath": rel_path}})
    return jsonify({"ok": False, "message": "Invalid certificate"}), 404
