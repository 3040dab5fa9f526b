import os
import pathlib
import sys
from datetime import date

import cv2
import numpy as np
import pytest
from PIL import Image
from PyPDF2 import PdfReader

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from questcert.app import create_app
from questcert.shared.certificates import CertificateRequest


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "slow" in item.keywords or "quarantine" in item.keywords:
            continue
        item.add_marker("full")
        if "no_smoke" in item.keywords:
            continue
        item.add_marker("smoke")


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SITE_ROOT", str(tmp_path))
    monkeypatch.delenv("FLASK_ENV", raising=False)
    monkeypatch.delenv("PUBLIC_APP_URL", raising=False)
    application = create_app(
        {
            "TESTING": True,
            "PUBLIC_APP_URL": "https://certs.example.com",
            "CERT_DATE_LOCALE": "en-US",
            "PHOTO_ROOT": str(tmp_path / "uploads"),
        }
    )
    yield application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def photo_file(tmp_path):
    path = tmp_path / "uploads" / "students" / "photo.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (60, 80), (200, 40, 40)).save(path, format="PNG")
    return path


@pytest.fixture
def make_request(tmp_path):
    def _make(**overrides):
        fields = {
            "output_path": str(tmp_path / "out" / "QT-CERT-2024-0001.pdf"),
            "certificate_number": "QT-CERT-2024-0001",
            "verification_url": "https://certs.example.com/verify/QT-CERT-2024-0001",
            "student_name": "Asha Verma",
            "course_title": "Full Stack Web Development",
            "student_photo_source": None,
            "start_date": date(2024, 1, 1),
            "end_date": date(2024, 3, 1),
            "issue_date": date(2024, 3, 2),
            "performance_label": "Excellent",
            "remarks": "",
        }
        fields.update(overrides)
        return CertificateRequest(**fields)

    return _make


def pdf_text(path) -> str:
    reader = PdfReader(str(path))
    return reader.pages[0].extract_text()


def pdf_images(path) -> list[Image.Image]:
    """Decode every image XObject on the first page into a Pillow image."""
    reader = PdfReader(str(path))
    resources = reader.pages[0]["/Resources"]
    if "/XObject" not in resources:
        return []
    xobjects = resources["/XObject"].get_object()
    images = []
    for name in xobjects:
        obj = xobjects[name].get_object()
        if obj.get("/Subtype") != "/Image":
            continue
        size = (int(obj["/Width"]), int(obj["/Height"]))
        mode = "RGB" if obj.get("/ColorSpace") == "/DeviceRGB" else "L"
        images.append(Image.frombytes(mode, size, obj.get_data()))
    return images


def decode_qr_codes(images) -> set[str]:
    detector = cv2.QRCodeDetector()
    found = set()
    for image in images:
        data, _, _ = detector.detectAndDecode(np.array(image.convert("L")))
        if data:
            found.add(data)
    return found
