"""Theme colors and color utilities for the UI."""


class BoardColors:
    """Warm paper palette for the pursuit board."""

    BG = "#F5EFDC"

    NODE_FILL = "#FFFFFF"
    NODE_STROKE = "#4A6FA5"
    EDGE = "#4A6FA5"
    EDGE_SHADOW = "#3A5A8A"

    POLICE = "#2979FF"
    POLICE_DARK = "#1565C0"
    THIEF = "#BF360C"
    THIEF_DARK = "#8B0000"
    EXIT = "#FF8F00"
    EXIT_GLOW = "#FFD54F"

    HIGHLIGHT = "#FFD600"
    VALID_MOVE = "#66BB6A"

    BUTTON = "#C8963E"
    BUTTON_DARK = "#A67A2E"
    BUTTON_TEXT = "#FFFFFF"

    TEXT = "#333333"
    TEXT_LIGHT = "#666666"
    TITLE = "#2C3E50"

    WIN = "#4CAF50"
    LOSE = "#F44336"
    STAR = "#FFD600"
    STAR_EMPTY = "#CCCCCC"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def star_text(stars: int, total: int = 3) -> str:
    """Render a star count as filled/empty star glyphs."""
    stars = max(0, min(total, stars))
    return "★" * stars + "☆" * (total - stars)
