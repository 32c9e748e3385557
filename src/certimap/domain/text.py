"""Text sanitation for strings scraped from upstream listings.

Sources deliver HTML-escaped names and addresses (``L&#039;Olivier``, ``Cr&eacute;teil``).
Only a fixed table of named entities is decoded; anything unknown is left as written.
"""

from __future__ import annotations

import math
import re
from typing import Final

_ENTITY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"&(#(?:[xX][0-9a-fA-F]+|\d+)|[a-zA-Z][\w-]*);"
)

NAMED_ENTITIES: Final[dict[str, str]] = {
    "amp": "&",
    "apos": "'",
    "quot": '"',
    "lt": "<",
    "gt": ">",
    "nbsp": " ",
    "rsquo": "'",
    "lsquo": "'",
    "ldquo": '"',
    "rdquo": '"',
    "hellip": "...",
    "ndash": "-",
    "mdash": "—",
    "deg": "°",
    "euro": "€",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "laquo": "«",
    "raquo": "»",
    "agrave": "à",
    "aacute": "á",
    "acirc": "â",
    "auml": "ä",
    "aring": "å",
    "aelig": "æ",
    "ccedil": "ç",
    "egrave": "è",
    "eacute": "é",
    "ecirc": "ê",
    "euml": "ë",
    "igrave": "ì",
    "iacute": "í",
    "icirc": "î",
    "iuml": "ï",
    "ograve": "ò",
    "oacute": "ó",
    "ocirc": "ô",
    "otilde": "õ",
    "ouml": "ö",
    "oslash": "ø",
    "ugrave": "ù",
    "uacute": "ú",
    "ucirc": "û",
    "uuml": "ü",
    "yacute": "ý",
    "yuml": "ÿ",
    "oelig": "œ",
}


_HIGH_SURROGATES: Final[range] = range(0xD800, 0xDC00)
_LOW_SURROGATES: Final[range] = range(0xDC00, 0xE000)


def _code_point(entity: str) -> int | None:
    if not entity.startswith("#"):
        return None
    is_hex = entity[1:2] in {"x", "X"}
    digits = entity[2:] if is_hex else entity[1:]
    try:
        value = int(digits, 16 if is_hex else 10)
    except ValueError:
        return None
    return value if value <= 0x10FFFF else None


def _is_surrogate(value: int) -> bool:
    return value in _HIGH_SURROGATES or value in _LOW_SURROGATES


def decode_entities(raw: str) -> str:
    """Decode numeric character references and the known named entities in ``raw``.

    Adjacent references forming a UTF-16 surrogate pair (``&#55357;&#56832;``) decode to a
    single character. Lone surrogates, out-of-range code points and unknown names are kept
    as written.
    """

    matches = list(_ENTITY_PATTERN.finditer(raw))
    pieces: list[str] = []
    position = 0
    index = 0
    while index < len(matches):
        match = matches[index]
        pieces.append(raw[position : match.start()])
        position = match.end()
        index += 1
        entity = match.group(1)
        value = _code_point(entity)
        if value is None:
            if entity.startswith("#"):
                pieces.append(match.group(0))
            else:
                # lookup is case-insensitive, as browsers tolerate "&AMP;"
                pieces.append(NAMED_ENTITIES.get(entity.lower(), match.group(0)))
            continue
        if value in _HIGH_SURROGATES and index < len(matches):
            following = matches[index]
            low = _code_point(following.group(1)) if following.start() == position else None
            if low is not None and low in _LOW_SURROGATES:
                pair = chr(value) + chr(low)
                pieces.append(pair.encode("utf-16", "surrogatepass").decode("utf-16"))
                position = following.end()
                index += 1
                continue
        pieces.append(match.group(0) if _is_surrogate(value) else chr(value))
    pieces.append(raw[position:])
    return "".join(pieces)


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return str(value)


def sanitize_text(value: object) -> str | None:
    """Return decoded, trimmed text or ``None``.

    Strings are decoded then stripped (blank results become ``None``), finite numbers are
    stringified and every other value yields ``None``. Never raises.
    """

    if isinstance(value, str):
        return decode_entities(value).strip() or None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return format_number(value)
    return None


def normalize_comparable(value: object) -> str:
    """Lower-cased sanitized text, or the empty string when there is none."""

    sanitized = sanitize_text(value)
    return sanitized.lower() if sanitized else ""
