"""Display colors handed out to connections."""

from __future__ import annotations

import random
import re

PALETTE = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    "#F8C471", "#82E0AA", "#F1948A", "#85C1E9", "#D7BDE2",
)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def assign_color(requested: str | None, rng: random.Random | None = None) -> str:
    """Keep a well-formed requested color, otherwise pick from the palette."""
    if requested and _HEX_COLOR.match(requested):
        return requested.upper()
    return (rng or random).choice(PALETTE)
