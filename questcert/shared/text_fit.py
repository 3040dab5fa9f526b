from __future__ import annotations

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

DEFAULT_MIN_SIZE = 12
ELLIPSIS = "…"


def fit_font_size(
    text: str,
    max_width: float,
    max_size: int,
    min_size: int = DEFAULT_MIN_SIZE,
    *,
    font_name: str = "Helvetica",
) -> int:
    """Largest size from ``max_size`` down to ``min_size`` that keeps ``text`` within ``max_width``.

    Stops at ``min_size`` even when the text still overflows; clipping is the
    caller's job.
    """
    if not text or min_size >= max_size:
        return max_size
    pt = max_size
    while pt > min_size and stringWidth(text, font_name, pt) > max_width:
        pt -= 1
    return pt


def ellipsize(text: str, font_name: str, font_size: float, max_width: float) -> str:
    if stringWidth(text, font_name, font_size) <= max_width:
        return text
    trimmed = text.rstrip()
    while trimmed and stringWidth(trimmed + ELLIPSIS, font_name, font_size) > max_width:
        trimmed = trimmed[:-1].rstrip()
    return trimmed + ELLIPSIS


def clip_lines(
    text: str,
    font_name: str,
    font_size: float,
    max_width: float,
    max_lines: int,
) -> list[str]:
    """Wrap ``text`` to ``max_width`` and keep at most ``max_lines`` lines.

    When lines are dropped the last kept line ends with an ellipsis.
    """
    if max_lines <= 0:
        return []
    lines = simpleSplit(text or "", font_name, font_size, max_width)
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    last = kept[-1].rstrip()
    while last and stringWidth(last + ELLIPSIS, font_name, font_size) > max_width:
        last = last[:-1].rstrip()
    kept[-1] = last + ELLIPSIS
    return kept
