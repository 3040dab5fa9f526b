import logging
import os
import sys

from flask import Flask

from .shared.certificates_layout import Branding
from .shared.time import normalize_locale

DEFAULT_PUBLIC_APP_URL = "http://localhost:5173"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    return float(raw)


def _resolve_public_app_url() -> str:
    configured = (os.getenv("PUBLIC_APP_URL") or "").strip().rstrip("/")
    if configured:
        return configured
    if (os.getenv("FLASK_ENV") or "").strip().lower() == "production":
        raise RuntimeError("PUBLIC_APP_URL is required in production.")
    return DEFAULT_PUBLIC_APP_URL


def _configure_logging(app: Flask) -> None:
    cert_logger = logging.getLogger("questcert")
    if not cert_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        cert_logger.addHandler(handler)
    cert_logger.setLevel(app.config["LOG_LEVEL"])


def create_app(config: dict | None = None):
    app = Flask(__name__)
    app.secret_key = os.getenv("SECRET_KEY", "dev")

    site_root = os.getenv("SITE_ROOT", "/srv")
    app.config["SITE_ROOT"] = site_root
    app.config["PUBLIC_APP_URL"] = _resolve_public_app_url()
    app.config["CERT_DATE_LOCALE"] = os.getenv("CERT_DATE_LOCALE", "en-US")
    app.config["PHOTO_ROOT"] = os.getenv("PHOTO_ROOT", site_root)
    app.config["PHOTO_RESTRICT_TO_ROOT"] = _env_flag("PHOTO_RESTRICT_TO_ROOT", "1")
    app.config["PHOTO_FETCH_TIMEOUT"] = _env_float("PHOTO_FETCH_TIMEOUT")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").upper()

    defaults = Branding()
    app.config["CERT_BRANDING"] = Branding(
        institution=os.getenv("CERT_INSTITUTION", defaults.institution),
        tagline=os.getenv("CERT_TAGLINE", defaults.tagline),
        footer=os.getenv("CERT_FOOTER", defaults.footer),
    )

    if config:
        app.config.update(config)

    normalize_locale(app.config["CERT_DATE_LOCALE"])
    _configure_logging(app)

    from .routes.certificates import bp as certificates_bp, verify_bp

    app.register_blueprint(certificates_bp)
    app.register_blueprint(verify_bp)

    return app
