"""Font and colour resolution shared by edits and stamps."""

import re
from typing import Dict, Tuple

RGB = Tuple[float, float, float]

# Display names -> PDF base-14 font codes understood by the encoder
FONT_CODES: Dict[str, str] = {
    "Helvetica": "helv",
    "Helvetica-Bold": "hebo",
    "Helvetica-Oblique": "heit",
    "Times-Roman": "tiro",
    "Times-Bold": "tibo",
    "Times-Italic": "tiit",
    "Courier": "cour",
    "Courier-Bold": "cobo",
}

DEFAULT_FONT = "Helvetica"

_HEX_COLOR = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def resolve_font(name: str) -> str:
    """Return the base-14 code for a font name, falling back to Helvetica"""
    if name in FONT_CODES.values():
        return name
    return FONT_CODES.get(name, FONT_CODES[DEFAULT_FONT])


def parse_hex_color(value: str) -> RGB:
    """Convert '#rrggbb' to fractional RGB; anything unparseable is black"""
    match = _HEX_COLOR.match((value or "").strip())
    if not match:
        return (0.0, 0.0, 0.0)
    return tuple(int(part, 16) / 255.0 for part in match.groups())
