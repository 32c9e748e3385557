from __future__ import annotations

import math

import pytest

from certimap.domain.text import decode_entities, normalize_comparable, sanitize_text


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("L&#039;Olivier", "L'Olivier"),
        ("Cr&eacute;teil", "Créteil"),
        ("Caf&#xE9; &amp; Th&eacute;", "Café & Thé"),
        ("Fr&EACUTE;res", "Fréres"),
        ("&laquo;Halal&raquo;", "«Halal»"),
        ("Prix &euro;", "Prix €"),
    ],
)
def test_decode_entities_known_references(raw: str, expected: str) -> None:
    assert decode_entities(raw) == expected


def test_decode_entities_leaves_unknown_entities_untouched() -> None:
    assert decode_entities("Tom &unknown; Jerry") == "Tom &unknown; Jerry"


def test_decode_entities_keeps_invalid_code_points() -> None:
    assert decode_entities("bad &#x110000; point") == "bad &#x110000; point"
    assert decode_entities("huge &#99999999999999999999; point") == (
        "huge &#99999999999999999999; point"
    )


@pytest.mark.parametrize(
    "raw",
    ["Caf&#55357;&#56832;", "Caf&#xD83D;&#xDE00;", "Caf&#x1F600;"],
)
def test_decode_entities_joins_surrogate_pairs(raw: str) -> None:
    assert sanitize_text(raw) == "Caf\U0001f600"
    assert decode_entities(raw).encode("utf-8") == "Caf😀".encode()


@pytest.mark.parametrize(
    "raw",
    ["Caf&#55357;", "&#56832;Caf", "Caf&#55357; &#56832;", "&#xDE00;&#xD83D;"],
)
def test_decode_entities_keeps_lone_surrogates_literal(raw: str) -> None:
    assert decode_entities(raw) == raw


def test_sanitize_text_trims_and_decodes() -> None:
    assert sanitize_text("  Boucherie&nbsp;du Coin  ") == "Boucherie du Coin"


@pytest.mark.parametrize("value", ["", "   ", "&nbsp;", None, True, [], {}, math.nan, math.inf])
def test_sanitize_text_yields_none_for_blank_or_unsupported(value: object) -> None:
    assert sanitize_text(value) is None


def test_sanitize_text_stringifies_finite_numbers() -> None:
    assert sanitize_text(42) == "42"
    assert sanitize_text(75001.0) == "75001"
    assert sanitize_text(1.5) == "1.5"
    assert sanitize_text(10**400) == str(10**400)


@pytest.mark.parametrize("value", ["Chez Ali", "  Caf&eacute;  ", "A &amp; B", 12, "x"])
def test_sanitize_text_is_idempotent(value: object) -> None:
    once = sanitize_text(value)
    assert sanitize_text(once) == once


def test_normalize_comparable_is_case_insensitive() -> None:
    assert normalize_comparable("  Le GOURMET ") == "le gourmet"
    assert normalize_comparable(None) == ""
