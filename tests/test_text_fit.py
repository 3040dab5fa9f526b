import pytest
from reportlab.pdfbase.pdfmetrics import stringWidth

from questcert.shared import text_fit
from questcert.shared.text_fit import ELLIPSIS, clip_lines, ellipsize, fit_font_size


def test_empty_text_returns_max_size():
    assert fit_font_size("", 10, 34, 18) == 34


def test_min_not_below_max_skips_measuring(monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("should not measure")

    monkeypatch.setattr(text_fit, "stringWidth", boom)
    assert fit_font_size("Anything at all", 5, 20, 20) == 20
    assert fit_font_size("Anything at all", 5, 20, 30) == 20


def test_short_text_keeps_max_size():
    assert fit_font_size("Ann", 300, 34, 18, font_name="Times-BoldItalic") == 34


def test_long_text_shrinks_until_it_fits():
    text = "Maximiliana Alexandrovna Konstantinopolskaya"
    size = fit_font_size(text, 400, 34, 12, font_name="Times-BoldItalic")
    assert 12 < size < 34
    assert stringWidth(text, "Times-BoldItalic", size) <= 400
    assert stringWidth(text, "Times-BoldItalic", size + 1) > 400


def test_overflowing_text_stops_at_min_size():
    assert fit_font_size("W" * 200, 100, 30, 14) == 14


def test_default_min_size_is_twelve():
    assert fit_font_size("W" * 200, 50, 20) == 12


@pytest.mark.parametrize(
    "text,width,max_size,min_size",
    [
        ("Data Science with Python", 260, 20, 12),
        ("A" * 80, 120, 40, 8),
        ("Short", 1, 16, 10),
        ("Introduction to Cloud Computing and DevOps Practices", 262, 20, 12),
    ],
)
def test_result_within_range_and_idempotent(text, width, max_size, min_size):
    first = fit_font_size(text, width, max_size, min_size, font_name="Helvetica-Bold")
    second = fit_font_size(text, width, max_size, min_size, font_name="Helvetica-Bold")
    assert min_size <= first <= max_size
    assert first == second


def test_clip_lines_keeps_short_text():
    assert clip_lines("Good attendance", "Helvetica", 10, 200, 3) == ["Good attendance"]


def test_clip_lines_truncates_with_ellipsis():
    text = " ".join(["consistently"] * 60) + " TAILWORD"
    lines = clip_lines(text, "Helvetica", 10, 200, 3)
    assert len(lines) == 3
    assert lines[-1].endswith(ELLIPSIS)
    assert all(stringWidth(line, "Helvetica", 10) <= 200 for line in lines)
    assert "TAILWORD" not in " ".join(lines)


def test_clip_lines_without_room_is_empty():
    assert clip_lines("anything", "Helvetica", 10, 200, 0) == []


def test_ellipsize_only_when_needed():
    assert ellipsize("short", "Helvetica", 8, 100) == "short"
    clipped = ellipsize("https://certs.example.com/verify/QT-CERT-2024-0001", "Helvetica", 8, 60)
    assert clipped.endswith(ELLIPSIS)
    assert stringWidth(clipped, "Helvetica", 8) <= 60
