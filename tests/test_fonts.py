import pytest

from certissuer.config import settings
from certissuer.services.fonts import FONT_VARIANTS, hex_to_rgb, resolve_font


@pytest.mark.parametrize(
    "family,bold,expected",
    [
        ("Helvetica", False, "Helvetica"),
        ("Helvetica", True, "Helvetica-Bold"),
        ("Times-Roman", False, "Times-Roman"),
        ("TimesRoman", True, "Times-Bold"),
        ("Courier", True, "Courier-Bold"),
    ],
)
def test_known_families(family, bold, expected):
    assert resolve_font(family, bold) == expected


def test_unknown_family_uses_default():
    assert resolve_font("Parisienne") == "Helvetica"
    assert resolve_font("Parisienne", is_bold=True) == "Helvetica-Bold"


def test_default_family_setting(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_FONT_FAMILY", "Courier")
    assert resolve_font("Comic Sans") == "Courier"

    monkeypatch.setattr(settings, "DEFAULT_FONT_FAMILY", "NotAFont")
    assert resolve_font("Comic Sans") == "Helvetica"


def test_font_table_has_regular_and_bold():
    for variants in FONT_VARIANTS.values():
        assert variants.regular
        assert variants.bold
        assert variants.regular != variants.bold


def test_hex_to_rgb():
    assert hex_to_rgb("#000000") == (0.0, 0.0, 0.0)
    assert hex_to_rgb("#FFFFFF") == (1.0, 1.0, 1.0)
    r, g, b = hex_to_rgb("#ff8000")
    assert r == 1.0
    assert g == pytest.approx(128 / 255)
    assert b == 0.0


@pytest.mark.parametrize("bad", ["", None, "#fff", "#zzzzzz", "red"])
def test_bad_colors_fall_back_to_black(bad):
    assert hex_to_rgb(bad) == (0.0, 0.0, 0.0)
