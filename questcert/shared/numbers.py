from __future__ import annotations

import os
import re
from datetime import date

CERT_NO_PREFIX = "QT-CERT"


def generate_cert_no(seq: int, year: int | None = None) -> str:
    year = year or date.today().year
    return f"{CERT_NO_PREFIX}-{year}-{int(seq):04d}"


def _extract_serial(filename: str, year: int) -> int | None:
    match = re.fullmatch(
        rf"{re.escape(CERT_NO_PREFIX)}-{year}-(\d+)\.pdf", filename, re.IGNORECASE
    )
    if not match:
        return None
    return int(match.group(1))


def next_certificate_serial(directory: str, year: int) -> int:
    """One more than the highest serial already rendered for ``year`` in ``directory``."""
    latest = 0
    if os.path.isdir(directory):
        for name in os.listdir(directory):
            serial = _extract_serial(name, year)
            if serial is not None and serial > latest:
                latest = serial
    return latest + 1


def build_verify_url(public_app_url: str, cert_no: str) -> str:
    base = (public_app_url or "").strip().rstrip("/")
    return f"{base}/verify/{cert_no}"
