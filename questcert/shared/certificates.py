from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import Any, Mapping

from PIL import Image, UnidentifiedImageError
from PyPDF2 import PdfReader, PdfWriter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..services.photos import resolve_photo
from ..services.verification_code import encode_verification_code
from .certificates_layout import (
    COLORS,
    COURSE_MAX_PT,
    COURSE_MIN_PT,
    DECORATIVE_TITLE,
    DEFAULT_BRANDING,
    FONT_BOLD,
    FONT_NAME,
    FONT_REGULAR,
    FONT_TITLE,
    GLOW_ALPHA,
    GLOWS,
    LEAD_TEXT,
    NAME_MAX_PT,
    NAME_MIN_PT,
    PAGE_SIZE,
    PHOTO_CAPTION,
    PHOTO_PLACEHOLDER,
    QR_CAPTION,
    QR_SUBTEXT,
    REGIONS,
    REMARKS_LEADING,
    REMARKS_PT,
    SECTION_TITLE,
    SIGNATURE_LABELS,
    STATEMENT_TEXT,
    Branding,
    LayoutRegion,
    mm,
)
from .errors import CertificateWriteError
from .storage import write_atomic
from .text_fit import clip_lines, ellipsize, fit_font_size
from .time import PLACEHOLDER, fmt_date, fmt_duration, normalize_locale, now_utc, parse_optional_iso_date

logger = logging.getLogger("questcert.certificates")

_IMAGE_ERRORS = (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError)


@dataclass(frozen=True)
class CertificateRequest:
    output_path: str
    certificate_number: str
    verification_url: str
    student_name: str
    course_title: str
    student_photo_source: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    issue_date: date | None = None
    performance_label: str | None = None
    remarks: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, output_path: str | None = None) -> "CertificateRequest":
        """Build a request from a JSON-style mapping (camelCase or snake_case keys).

        Dates must be ISO formatted; anything else raises ``ValueError``.
        """

        def pick(*keys: str):
            for key in keys:
                if key in payload and payload[key] is not None:
                    return payload[key]
            return None

        def text(*keys: str) -> str | None:
            value = pick(*keys)
            if value is None:
                return None
            return str(value).strip() or None

        path = output_path or text("output_path", "outputPath", "outPath")
        if not path:
            raise ValueError("output path is required")
        return cls(
            output_path=path,
            certificate_number=text("certificate_number", "certificateNumber", "certNo") or "",
            verification_url=text("verification_url", "verificationUrl", "verifyUrl") or "",
            student_name=text("student_name", "studentName") or "",
            course_title=text("course_title", "courseTitle") or "",
            student_photo_source=text("student_photo_source", "studentPhotoSource"),
            start_date=parse_optional_iso_date(pick("start_date", "startDate"), "startDate"),
            end_date=parse_optional_iso_date(pick("end_date", "endDate"), "endDate"),
            issue_date=parse_optional_iso_date(pick("issue_date", "issueDate"), "issueDate"),
            performance_label=text("performance_label", "performanceLabel", "performance"),
            remarks=text("remarks"),
        )


def _or_placeholder(value: str | None) -> str:
    cleaned = (value or "").strip()
    return cleaned or PLACEHOLDER


def _clip_to(c: canvas.Canvas, region: LayoutRegion) -> None:
    path = c.beginPath()
    path.rect(region.x, region.y, region.width, region.height)
    c.clipPath(path, stroke=0, fill=0)


def _card(c: canvas.Canvas, region: LayoutRegion, fill, stroke, radius: float = 10) -> None:
    c.setFillColor(fill)
    c.setStrokeColor(stroke)
    c.setLineWidth(1)
    c.roundRect(region.x, region.y, region.width, region.height, radius, stroke=1, fill=1)


def _draw_background(c: canvas.Canvas) -> None:
    page = REGIONS["page"]
    c.setFillColor(COLORS["background"])
    c.rect(page.x, page.y, page.width, page.height, stroke=0, fill=1)
    c.saveState()
    c.setFillAlpha(GLOW_ALPHA)
    for (x, y, radius), color in zip(GLOWS, (COLORS["navy"], COLORS["green"])):
        c.setFillColor(color)
        c.circle(x, y, radius, stroke=0, fill=1)
    c.restoreState()


def _draw_frames(c: canvas.Canvas) -> None:
    outer = REGIONS["frame_outer"]
    inner = REGIONS["frame_inner"]
    c.setStrokeColor(COLORS["navy"])
    c.setLineWidth(3)
    c.roundRect(outer.x, outer.y, outer.width, outer.height, 14, stroke=1, fill=0)
    c.setStrokeColor(COLORS["green"])
    c.setLineWidth(1)
    c.roundRect(inner.x, inner.y, inner.width, inner.height, 10, stroke=1, fill=0)


def _draw_header(c: canvas.Canvas, branding: Branding) -> None:
    header = REGIONS["header"]
    c.setFillColor(COLORS["navy"])
    c.roundRect(header.x, header.y, header.width, header.height, 10, stroke=0, fill=1)

    institution = _or_placeholder(branding.institution)
    size = fit_font_size(institution, header.width - 40, 28, 16, font_name=FONT_BOLD)
    c.setFillColor(COLORS["white"])
    c.setFont(FONT_BOLD, size)
    c.drawCentredString(header.center_x, header.top - 40, institution)

    c.setFillColor(COLORS["tagline"])
    c.setFont(FONT_REGULAR, 11)
    c.drawCentredString(
        header.center_x,
        header.y + 18,
        ellipsize(branding.tagline or "", FONT_REGULAR, 11, header.width - 40),
    )


def _draw_titles(c: canvas.Canvas) -> None:
    title = REGIONS["title"]
    c.setFillColor(COLORS["green"])
    c.setFont(FONT_BOLD, 11)
    c.drawCentredString(title.center_x, title.top - 14, SECTION_TITLE)
    c.setFillColor(COLORS["navy"])
    c.setFont(FONT_TITLE, 34)
    c.drawCentredString(title.center_x, title.y + 8, DECORATIVE_TITLE)


def _draw_meta(c: canvas.Canvas, rows: list[tuple[str, str]]) -> None:
    meta = REGIONS["meta"]
    value_x = meta.x + mm(30)
    value_width = meta.right - value_x
    for index, (label, value) in enumerate(rows):
        baseline = meta.top - 12 - index * 14
        c.setFillColor(COLORS["label"])
        c.setFont(FONT_BOLD, 9)
        c.drawString(meta.x, baseline, label)
        c.setFillColor(COLORS["text"])
        c.setFont(FONT_REGULAR, 9)
        c.drawString(value_x, baseline, ellipsize(value, FONT_REGULAR, 9, value_width))


def _draw_photo_image(c: canvas.Canvas, data: bytes, frame: LayoutRegion) -> bool:
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            photo = img.convert("RGB")
        iw, ih = photo.size
        scale = min(frame.width / iw, frame.height / ih)
        width, height = iw * scale, ih * scale
        c.drawImage(
            ImageReader(photo),
            frame.center_x - width / 2.0,
            frame.center_y - height / 2.0,
            width=width,
            height=height,
        )
    except _IMAGE_ERRORS as exc:
        logger.warning("[CERT-PHOTO] undecodable photo left blank: %s", exc)
        return False
    return True


def _draw_photo_card(c: canvas.Canvas, photo: bytes | None) -> None:
    card = REGIONS["photo_card"]
    frame = REGIONS["photo_frame"]
    _card(c, card, COLORS["white"], COLORS["card_border"])
    c.setFillColor(COLORS["label"])
    c.setFont(FONT_BOLD, 9)
    c.drawCentredString(card.center_x, card.top - 14, PHOTO_CAPTION)
    _card(c, frame, COLORS["slot_fill"], COLORS["slot_border"], radius=8)

    if photo is None:
        c.setFillColor(COLORS["muted"])
        c.setFont(FONT_REGULAR, 10)
        c.drawCentredString(frame.center_x, frame.center_y - 3, PHOTO_PLACEHOLDER)
        return
    _draw_photo_image(c, photo, frame)


def _draw_narrative(c: canvas.Canvas, student_name: str) -> None:
    name_box = REGIONS["student_name"]
    c.setFillColor(COLORS["text"])
    c.setFont(FONT_REGULAR, 14)
    c.drawCentredString(name_box.center_x, name_box.top + 14, LEAD_TEXT)

    size = fit_font_size(student_name, name_box.width, NAME_MAX_PT, NAME_MIN_PT, font_name=FONT_NAME)
    c.saveState()
    _clip_to(c, name_box)
    c.setFillColor(COLORS["name"])
    c.setFont(FONT_NAME, size)
    c.drawCentredString(name_box.center_x, name_box.y + 10, student_name)
    c.restoreState()

    c.setFillColor(COLORS["text"])
    c.setFont(FONT_REGULAR, 11)
    c.drawCentredString(name_box.center_x, name_box.y - 16, STATEMENT_TEXT)


def _draw_course_panel(c: canvas.Canvas, course_title: str, duration: str) -> None:
    panel = REGIONS["course_panel"]
    _card(c, panel, COLORS["course_fill"], COLORS["course_border"])
    text_box = panel.inset(8)

    size = fit_font_size(course_title, text_box.width, COURSE_MAX_PT, COURSE_MIN_PT, font_name=FONT_BOLD)
    c.saveState()
    _clip_to(c, text_box)
    c.setFillColor(COLORS["navy"])
    c.setFont(FONT_BOLD, size)
    c.drawCentredString(panel.center_x, panel.top - 30, course_title)
    c.restoreState()

    c.setFillColor(COLORS["label"])
    c.setFont(FONT_REGULAR, 10)
    c.drawCentredString(
        panel.center_x,
        panel.y + 16,
        ellipsize(f"Course Duration: {duration}", FONT_REGULAR, 10, text_box.width),
    )


def _draw_performance_panel(c: canvas.Canvas, performance: str, remarks: str) -> None:
    panel = REGIONS["performance_panel"]
    box = REGIONS["remarks"]
    _card(c, panel, COLORS["perf_fill"], COLORS["perf_border"])

    label_x = panel.x + 10
    value_x = label_x + mm(28)
    c.setFillColor(COLORS["label"])
    c.setFont(FONT_BOLD, 10)
    c.drawString(label_x, panel.top - 20, "Performance:")
    c.drawString(label_x, panel.top - 36, "Remarks:")

    c.setFillColor(COLORS["text"])
    c.setFont(FONT_REGULAR, 10)
    c.drawString(
        value_x,
        panel.top - 20,
        ellipsize(performance, FONT_REGULAR, 10, panel.right - 10 - value_x),
    )

    max_lines = int(box.height // REMARKS_LEADING)
    lines = clip_lines(remarks, FONT_REGULAR, REMARKS_PT, box.width, max_lines)
    c.setFont(FONT_REGULAR, REMARKS_PT)
    for index, line in enumerate(lines):
        c.drawString(box.x, box.top - REMARKS_PT - index * REMARKS_LEADING, line)


def _draw_qr_card(c: canvas.Canvas, qr_png: bytes, verification_url: str) -> None:
    card = REGIONS["qr_card"]
    qr = REGIONS["qr_code"]
    _card(c, card, COLORS["white"], COLORS["card_border"])
    c.drawImage(ImageReader(BytesIO(qr_png)), qr.x, qr.y, width=qr.width, height=qr.height)

    c.setFillColor(COLORS["label"])
    c.setFont(FONT_BOLD, 9)
    c.drawCentredString(card.center_x, qr.y - 14, QR_CAPTION)
    c.setFillColor(COLORS["muted"])
    c.setFont(FONT_REGULAR, 7.5)
    c.drawCentredString(card.center_x, qr.y - 26, QR_SUBTEXT)
    if verification_url:
        c.setFont(FONT_REGULAR, 6.5)
        c.drawCentredString(
            card.center_x,
            qr.y - 38,
            ellipsize(verification_url, FONT_REGULAR, 6.5, card.width - 10),
        )


def _draw_signatures(c: canvas.Canvas) -> None:
    c.setStrokeColor(COLORS["name"])
    c.setLineWidth(1)
    for key, label in zip(("signature_left", "signature_right"), SIGNATURE_LABELS):
        line = REGIONS[key]
        c.line(line.x, line.top, line.right, line.top)
        c.setFillColor(COLORS["name"])
        c.setFont(FONT_BOLD, 10)
        c.drawCentredString(line.center_x, line.y + 6, label)


def _draw_footer(c: canvas.Canvas, branding: Branding) -> None:
    footer = REGIONS["footer"]
    c.setFillColor(COLORS["footer"])
    c.setFont(FONT_REGULAR, 8.5)
    c.drawCentredString(
        footer.center_x,
        footer.y + 4,
        ellipsize(branding.footer or "", FONT_REGULAR, 8.5, footer.width),
    )


def _finalize_pdf(raw: bytes, request: CertificateRequest, branding: Branding) -> bytes:
    page = PdfReader(BytesIO(raw)).pages[0]
    writer = PdfWriter()
    writer.add_page(page)
    writer.add_metadata(
        {
            "/Title": f"Certificate {request.certificate_number}".strip(),
            "/Author": branding.institution,
            "/Subject": request.certificate_number,
            "/Creator": "questcert",
        }
    )
    out = BytesIO()
    writer.write(out)
    return out.getvalue()


def compose_certificate_pdf(
    request: CertificateRequest,
    photo: bytes | None,
    qr_png: bytes,
    *,
    date_locale: str = "en-US",
    branding: Branding | None = None,
) -> bytes:
    """Draw the certificate onto a fresh canvas and return the finished PDF bytes."""
    branding = branding or DEFAULT_BRANDING
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=PAGE_SIZE)

    _draw_background(c)
    _draw_frames(c)
    _draw_header(c, branding)
    _draw_titles(c)
    _draw_meta(
        c,
        [
            ("Certificate No:", _or_placeholder(request.certificate_number)),
            ("Issue Date:", fmt_date(request.issue_date, date_locale)),
            ("Generated On:", fmt_date(now_utc(), date_locale)),
        ],
    )
    _draw_photo_card(c, photo)
    _draw_narrative(c, _or_placeholder(request.student_name))
    _draw_course_panel(
        c,
        _or_placeholder(request.course_title),
        fmt_duration(request.start_date, request.end_date, date_locale),
    )
    _draw_performance_panel(
        c,
        _or_placeholder(request.performance_label),
        _or_placeholder(request.remarks),
    )
    _draw_qr_card(c, qr_png, request.verification_url)
    _draw_signatures(c)
    _draw_footer(c, branding)

    c.showPage()
    c.save()
    return _finalize_pdf(buffer.getvalue(), request, branding)


async def render_certificate(
    request: CertificateRequest,
    *,
    photo_root: str | None = None,
    restrict_photo_root: bool = False,
    photo_timeout: float | None = None,
    date_locale: str = "en-US",
    branding: Branding | None = None,
) -> str:
    """Render ``request`` to ``request.output_path`` and return that path.

    The photo and the QR code are produced concurrently. Returns only after
    the PDF has been written and moved into place.
    """
    normalize_locale(date_locale)
    photo, qr_png = await asyncio.gather(
        resolve_photo(
            request.student_photo_source,
            base_dir=photo_root,
            restrict_to_base=restrict_photo_root,
            timeout=photo_timeout,
        ),
        encode_verification_code(request.verification_url),
    )
    pdf_bytes = await asyncio.to_thread(
        compose_certificate_pdf,
        request,
        photo,
        qr_png,
        date_locale=date_locale,
        branding=branding,
    )
    try:
        await asyncio.to_thread(write_atomic, request.output_path, pdf_bytes)
    except OSError as exc:
        logger.error(
            "[CERT-FAIL] cert_no=%s path=%s error=%s",
            request.certificate_number,
            request.output_path,
            exc,
        )
        raise CertificateWriteError(
            f"Could not write certificate to {request.output_path}"
        ) from exc

    logger.info(
        "[CERT] cert_no=%s path=%s photo=%s bytes=%s",
        request.certificate_number,
        request.output_path,
        "yes" if photo is not None else "no",
        len(pdf_bytes),
    )
    return request.output_path


def render_certificate_sync(request: CertificateRequest, **kwargs) -> str:
    return asyncio.run(render_certificate(request, **kwargs))
