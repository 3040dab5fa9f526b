from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4

_MM = 72.0 / 25.4


def mm(v: float) -> float:
    return v * _MM


PAGE_SIZE = A4
PAGE_WIDTH, PAGE_HEIGHT = PAGE_SIZE

OUTER_FRAME_INSET = mm(8)
INNER_FRAME_INSET = mm(11)
CONTENT_MARGIN = mm(14)
CONTENT_X = CONTENT_MARGIN
CONTENT_WIDTH = PAGE_WIDTH - 2 * CONTENT_MARGIN

SIDE_CARD_WIDTH = mm(36)
COLUMN_GAP = mm(6)
CENTER_X = CONTENT_X + SIDE_CARD_WIDTH + COLUMN_GAP
CENTER_WIDTH = CONTENT_WIDTH - 2 * (SIDE_CARD_WIDTH + COLUMN_GAP)

HEADER_HEIGHT = 84.0
QR_SIZE = 80.0
SIGN_LINE_WIDTH = mm(46)


class LayoutRegion(NamedTuple):
    """Rectangle in PDF points, origin at the bottom-left of the page."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2.0

    def inset(self, dx: float, dy: float | None = None) -> "LayoutRegion":
        dy = dx if dy is None else dy
        return LayoutRegion(
            self.x + dx, self.y + dy, self.width - 2 * dx, self.height - 2 * dy
        )


def _qr_card() -> LayoutRegion:
    return LayoutRegion(CONTENT_X + CONTENT_WIDTH - SIDE_CARD_WIDTH, 390.0, SIDE_CARD_WIDTH, 180.0)


def _photo_card() -> LayoutRegion:
    return LayoutRegion(CONTENT_X, 410.0, SIDE_CARD_WIDTH, 160.0)


# Every rectangle of the certificate template. Only the frames and the
# narrative block (which contains the student name) overlap other regions.
REGIONS: dict[str, LayoutRegion] = {
    "page": LayoutRegion(0.0, 0.0, PAGE_WIDTH, PAGE_HEIGHT),
    "frame_outer": LayoutRegion(
        OUTER_FRAME_INSET,
        OUTER_FRAME_INSET,
        PAGE_WIDTH - 2 * OUTER_FRAME_INSET,
        PAGE_HEIGHT - 2 * OUTER_FRAME_INSET,
    ),
    "frame_inner": LayoutRegion(
        INNER_FRAME_INSET,
        INNER_FRAME_INSET,
        PAGE_WIDTH - 2 * INNER_FRAME_INSET,
        PAGE_HEIGHT - 2 * INNER_FRAME_INSET,
    ),
    "header": LayoutRegion(
        CONTENT_X, PAGE_HEIGHT - CONTENT_MARGIN - HEADER_HEIGHT, CONTENT_WIDTH, HEADER_HEIGHT
    ),
    "title": LayoutRegion(CONTENT_X, 640.0, CONTENT_WIDTH, 70.0),
    "meta": LayoutRegion(CONTENT_X + CONTENT_WIDTH - mm(64), 580.0, mm(64), 54.0),
    "photo_card": _photo_card(),
    "photo_frame": LayoutRegion(
        _photo_card().x + 7.0, _photo_card().y + 7.0, SIDE_CARD_WIDTH - 14.0, 160.0 - 30.0
    ),
    "narrative": LayoutRegion(CENTER_X, 474.0, CENTER_WIDTH, 90.0),
    "student_name": LayoutRegion(CENTER_X, 498.0, CENTER_WIDTH, 40.0),
    "course_panel": LayoutRegion(CENTER_X, 392.0, CENTER_WIDTH, 76.0),
    "performance_panel": LayoutRegion(CENTER_X, 282.0, CENTER_WIDTH, 100.0),
    "remarks": LayoutRegion(CENTER_X + 10.0, 290.0, CENTER_WIDTH - 20.0, 46.0),
    "qr_card": _qr_card(),
    "qr_code": LayoutRegion(
        _qr_card().center_x - QR_SIZE / 2.0, _qr_card().top - 12.0 - QR_SIZE, QR_SIZE, QR_SIZE
    ),
    "signature_left": LayoutRegion(PAGE_WIDTH * 0.3 - SIGN_LINE_WIDTH / 2.0, 170.0, SIGN_LINE_WIDTH, 20.0),
    "signature_right": LayoutRegion(PAGE_WIDTH * 0.7 - SIGN_LINE_WIDTH / 2.0, 170.0, SIGN_LINE_WIDTH, 20.0),
    "footer": LayoutRegion(CONTENT_X, 44.0, CONTENT_WIDTH, 16.0),
}

# (center_x, center_y, radius) of the decorative corner glows.
GLOWS: tuple[tuple[float, float, float], ...] = (
    (PAGE_WIDTH * 0.10, PAGE_HEIGHT * 0.90, 210.0),
    (PAGE_WIDTH * 0.90, PAGE_HEIGHT * 0.08, 210.0),
)
GLOW_ALPHA = 0.08

COLORS = {
    "background": HexColor("#F8FBFF"),
    "navy": HexColor("#000080"),
    "green": HexColor("#008000"),
    "text": HexColor("#0F172A"),
    "name": HexColor("#111827"),
    "label": HexColor("#334155"),
    "muted": HexColor("#64748B"),
    "footer": HexColor("#6B7280"),
    "tagline": HexColor("#DBE7FF"),
    "white": HexColor("#FFFFFF"),
    "card_border": HexColor("#C8DCF6"),
    "slot_border": HexColor("#D6E5FA"),
    "slot_fill": HexColor("#F9FBFF"),
    "course_fill": HexColor("#F2F8FF"),
    "course_border": HexColor("#BDD6FA"),
    "perf_fill": HexColor("#F8FFF5"),
    "perf_border": HexColor("#BEE4C7"),
}

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_TITLE = "Times-Bold"
FONT_NAME = "Times-BoldItalic"

NAME_MAX_PT = 34
NAME_MIN_PT = 18
COURSE_MAX_PT = 20
COURSE_MIN_PT = 12
REMARKS_PT = 10
REMARKS_LEADING = 12

SECTION_TITLE = "CERTIFICATE OF COMPLETION"
DECORATIVE_TITLE = "Achievement Certificate"
LEAD_TEXT = "This is to certify that"
STATEMENT_TEXT = "has successfully completed the training program"
PHOTO_CAPTION = "Student Photo"
PHOTO_PLACEHOLDER = "No Photo"
QR_CAPTION = "Scan to Verify"
QR_SUBTEXT = "System generated certificate"
SIGNATURE_LABELS = ("Authorized Signatory", "Seal")


@dataclass(frozen=True)
class Branding:
    institution: str = "QUEST TECHNOLOGY"
    tagline: str = "Skill Training | Tuition | Placement Support"
    footer: str = (
        "Quest Technology | This certificate can be verified using QR code "
        "and certificate number."
    )


DEFAULT_BRANDING = Branding()
